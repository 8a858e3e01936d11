"""
Low level tensor network manipulations.

Conventions
  MPS tensors are stored A[left, right, physical]:

      1--A--2
         |
         3

  MPO tensors are stored W[left, right, top, bottom], two-site
  operators h[top_left, top_right, bottom_left, bottom_right]:

         3                 1  2
         |                 |  |
      1--W--2              hhhh
         |                 |  |
         4                 3  4

  Environment matrices X are stored X[ket, bra], MPO environment blocks
  B[ket, bra, mpo]. Arguments named B or Bra in the transfer maps are
  the already conjugated bra tensors.
"""
import tensornetwork as tn


BACKEND = "numpy"


def ncon(tensors, idxs):
    return tn.ncon(tensors, idxs, backend=BACKEND)


###############################################################################
# Gauge transformations.
###############################################################################
def leftmult(lam, gam):
    """
    1--lam--gam--2
            |
            3
    where lam is stored 1--lam--2
    """
    return ncon([lam, gam], [[-1, 1], [1, -2, -3]])


def rightmult(gam, lam):
    """
    1--gam--lam--2
       |
       3
    """
    return ncon([gam, lam], [[-1, 1, -3], [1, -2]])


def gauge_transform(gl, A, gr):
    """
    1--gl--A--gr--2
           |
           3
    """
    return rightmult(leftmult(gl, A), gr)


def proj(A, B):
    """
    Contract A with B to find <A|B>; A is not conjugated.
    """
    idxs = [list(range(1, A.ndim + 1)), list(range(1, B.ndim + 1))]
    return ncon([A, B], idxs)


###############################################################################
# Transfer maps.
###############################################################################
def XopL(A, B=None, X=None):
    """
      |---A---2
      |   |
      X   |
      |   |
      |---B---1
    """
    if B is None:
        B = A.conj()
    if X is None:
        return ncon([A, B], [[1, -1, 2], [1, -2, 2]])
    return ncon([X, A, B], [[1, 2], [1, -1, 3], [2, -2, 3]])


def XopR(A, B=None, X=None):
    """
      1---A---|
          |   |
          |   X
          |   |
      2---B---|
    """
    if B is None:
        B = A.conj()
    if X is None:
        return ncon([A, B], [[-1, 1, 2], [-2, 1, 2]])
    return ncon([A, B, X], [[-1, 1, 3], [-2, 2, 3], [1, 2]])


def mpo_XopL(X, A, W, B=None):
    """
      |---A---1
      |   |
      X---W---3
      |   |
      |---B---2
    """
    if B is None:
        B = A.conj()
    return ncon([X, A, W, B],
                [[1, 2, 3], [1, -1, 4], [3, -3, 5, 4], [2, -2, 5]])


def mpo_XopR(X, A, W, B=None):
    """
      1---A---|
          |   |
      3---W---X
          |   |
      2---B---|
    """
    if B is None:
        B = A.conj()
    return ncon([A, W, B, X],
                [[-1, 1, 4], [-3, 3, 5, 4], [-2, 2, 5], [1, 2, 3]])


def mpo_block_norm(B_left, C, B_right):
    """
      |---C---|
      |       |
      BL------BR
      |       |
      |---C*--|
    """
    return ncon([B_left, C, C.conj(), B_right],
                [[1, 2, 3], [1, 4], [2, 5], [4, 5, 3]])


###############################################################################
# Two-site energy densities.
###############################################################################
def compute_hL(A_L, h):
    """
      |---A_L---A_L---1
      |    |     |
      |    hhhhhhh
      |    |     |
      |---A_L*--A_L*--2
    """
    A_Ld = A_L.conj()
    return ncon([A_L, A_L, h, A_Ld, A_Ld],
                [[1, 2, 5], [2, -1, 6], [3, 4, 5, 6], [1, 7, 3],
                 [7, -2, 4]])


def compute_hR(A_R, h):
    """
      1---A_R---A_R---|
           |     |    |
           hhhhhhh    |
           |     |    |
      2---A_R*--A_R*--|
    """
    A_Rd = A_R.conj()
    return ncon([A_R, A_R, h, A_Rd, A_Rd],
                [[-1, 1, 5], [1, 2, 6], [3, 4, 5, 6], [-2, 7, 3],
                 [7, 2, 4]])


###############################################################################
# Effective Hamiltonians.
###############################################################################
def apply_HAc_twosite(A_C, A_L, A_R, h, LH, RH):
    """
    Compute A'C via eq 11 of vumps paper (131 arxiv).
    """
    A_Ld = A_L.conj()
    A_Rd = A_R.conj()
    term1 = ncon([A_L, A_Ld, h, A_C],
                 [[1, 2, 4], [1, -1, 3], [3, -3, 4, 5], [2, -2, 5]])
    term2 = ncon([A_C, A_R, A_Rd, h],
                 [[-1, 1, 3], [1, 2, 4], [-2, 2, 5], [-3, 5, 3, 4]])
    term3 = ncon([LH, A_C], [[1, -1], [1, -2, -3]])
    term4 = ncon([A_C, RH], [[-1, 1, -3], [1, -2]])
    return term1 + term2 + term3 + term4


def apply_Hc_twosite(C, A_L, A_R, h, LH, RH):
    """
    Compute C' via eq 16 of vumps paper (131 arxiv).
    """
    A_Ld = A_L.conj()
    A_Rd = A_R.conj()
    term1 = ncon([A_L, A_Ld, C, A_R, A_Rd, h],
                 [[1, 2, 5], [1, -1, 3], [2, 7], [7, 8, 6], [-2, 8, 4],
                  [3, 4, 5, 6]])
    term2 = ncon([LH, C], [[1, -1], [1, -2]])
    term3 = ncon([C, RH], [[-1, 1], [1, -2]])
    return term1 + term2 + term3


def apply_HAc_mpo(A_C, W, B_left, B_right):
    """
      |---A_C---|
      |    |    |
      BL---W----BR
      |    |    |
      1    3    2
    """
    return ncon([B_left, A_C, W, B_right],
                [[1, -1, 3], [1, 2, 4], [3, 5, -3, 4], [2, -2, 5]])


def apply_Hc_mpo(C, B_left, B_right):
    """
      |---C---|
      |       |
      BL------BR
      |       |
      1       2
    """
    return ncon([B_left, C, B_right], [[1, -1, 3], [1, 2], [2, -2, 3]])


###############################################################################
# Two-site objects for the variance and subspace expansion.
###############################################################################
def apply_HA2_twosite(A2, h, LH, RH):
    """
    The two-site effective Hamiltonian, without the terms coupling the
    pair to its neighbours, acting on A2[left, s1, s2, right]:
      |---A2A2---|
      |   |  |   |
      LH  hhhh   RH
      |   |  |   |
      1   2  3   4
    """
    term1 = ncon([h, A2], [[-2, -3, 1, 2], [-1, 1, 2, -4]])
    term2 = ncon([LH, A2], [[1, -1], [1, -2, -3, -4]])
    term3 = ncon([A2, RH], [[-1, -2, -3, 1], [1, -4]])
    return term1 + term2 + term3


def twosite_tensor(A_C, A_R):
    """
    1--A_C--A_R--4
        |    |
        2    3
    """
    return ncon([A_C, A_R], [[-1, 1, -2], [1, -4, -3]])


def project_twosite(A2, N_L, N_R):
    """
    1--N_L*--A2A2--N_R*--2
        |____|  |_____|
    """
    return ncon([N_L.conj(), A2, N_R.conj()],
                [[1, -1, 2], [1, 2, 3, 4], [-2, 4, 3]])


def project_onesite(A, N_L):
    """
      |--A----2
      |  |
      |--N_L*--1
    """
    return ncon([N_L.conj(), A], [[1, -1, 2], [1, -2, 2]])


def null_left_env(B_left, A_C, W, N_L):
    """
      |---A_C---1
      |    |
      BL---W----3
      |    |
      |---N_L*--2
    """
    return mpo_XopL(B_left, A_C, W, B=N_L.conj())


def null_right_env(B_right, A_R, W, N_R):
    """
      1---A_R---|
           |    |
      3----W----BR
           |    |
      2---N_R*--|
    """
    return mpo_XopR(B_right, A_R, W, B=N_R.conj())


def contract_envs(G_left, G_right):
    """
      |---1    2---|
      GL-----------GR
      |------------|
    """
    return ncon([G_left, G_right], [[1, -1, 2], [1, -2, 2]])