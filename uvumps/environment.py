"""
Environment blocks: the fixed points of the transfer maps dressed by the
operator. Left blocks are built from A_L, right ones from A_R. For
Schur form and two-site operators these are the renormalized
Hamiltonians of the half-infinite chains, found by summing geometric
series with linear solves; for generic MPOs they are the dominant
eigenvectors of the MPO transfer maps.
"""
import numpy as np
from scipy.sparse.linalg import LinearOperator

import uvumps.contractions as ct
import uvumps.krylov as krylov
import uvumps.mps_linalg as mps_linalg


def _real_if_close(x, thresh=1E-12):
    if abs(np.imag(x)) <= thresh * max(abs(x), 1.):
        return float(np.real(x))
    return x


def _warm_start(B_old, shape, channel=None):
    """
    The matching channel of the previous block, if it has the right shape.
    """
    if B_old is None or B_old.shape[:2] != shape[:2]:
        return None
    if channel is None:
        return B_old
    return B_old[:, :, channel]


###############################################################################
# Linear operators.
###############################################################################
def LH_linear_operator(A_L, R, lam=1., project=True):
    """
    Return, as a LinearOperator, the LHS of the equation found by
    summing the geometric series for the left environment,
    v -> v - lam T_L(v) [+ (v|R) 1].
    """
    D = A_L.shape[1]
    dtype = np.result_type(A_L, R, lam)
    Id = np.eye(D, dtype=dtype)

    def matvec(v):
        v = v.reshape((D, D))
        Th_v = lam * ct.XopL(A_L, X=v)
        out = v - Th_v
        if project:
            out = out + ct.proj(v, R)*Id
        return out.flatten()

    op = LinearOperator((D**2, D**2), matvec=matvec, dtype=dtype)
    return op


def RH_linear_operator(A_R, L, lam=1., project=True):
    """
    Return, as a LinearOperator, the LHS of the equation found by
    summing the geometric series for the right environment,
    v -> v - lam T_R(v) [+ (L|v) 1].
    """
    D = A_R.shape[0]
    dtype = np.result_type(A_R, L, lam)
    Id = np.eye(D, dtype=dtype)

    def matvec(v):
        v = v.reshape((D, D))
        Th_v = lam * ct.XopR(A_R, X=v)
        out = v - Th_v
        if project:
            out = out + ct.proj(L, v)*Id
        return out.flatten()

    op = LinearOperator((D**2, D**2), matvec=matvec, dtype=dtype)
    return op


def call_solver(op, rhs, x0, params):
    """
    Solves op x = rhs with the linear solver chosen by params.
    """
    x = krylov.linsolve(op, rhs, x0, params)
    return x.reshape(rhs.shape)


###############################################################################
# Fixed points, by operator mode.
###############################################################################
def fixedblock_twosite(h, A, direction, params, C, B_old=None):
    """
    The renormalized half-chain Hamiltonian of a nearest neighbour
    operator h. The energy density e = (h|fp) is subtracted, and the
    projector onto the fixed point fp makes the system nonsingular.

    RETURNS
    -------
    B (array, (D, D)): The environment block.
    e (scalar): The energy density.
    """
    l, r = mps_linalg.fixed_points(C)
    D = A.shape[1]
    if direction == "l":
        hbare = ct.compute_hL(A, h)
        e = ct.proj(hbare, r).item()
        op = LH_linear_operator(A, r)
    else:
        hbare = ct.compute_hR(A, h)
        e = ct.proj(l, hbare).item()
        op = RH_linear_operator(A, l)
    rhs = hbare - e*np.eye(D, dtype=hbare.dtype)
    B = call_solver(op, rhs, _warm_start(B_old, rhs.shape), params)
    return (B, e)


def fixedblock_schur(H, A, direction, params, C, B_old=None):
    """
    The environment block of a lower triangular (Schur form) MPO, built one
    channel at a time. The left block starts from the identity in the
    last channel and proceeds downwards; the right block starts from the
    identity in the first channel and proceeds upwards. Each channel
    first collects the contributions Y of the channels already found, then

      - if the diagonal entry is zero, takes Y itself;
      - if the diagonal entry is lam != 0, solves x - lam T(x) = Y;
      - in the final channel (diagonal entry 1), subtracts the energy
        density e = (Y|fp) and solves the projected equation
        x - T(x) + (x|fp) 1 = Y - e 1.

    RETURNS
    -------
    B (array, (D, D, chi)): The environment block.
    e (scalar): The energy density.
    """
    W = H.W
    chi = H.chi
    D = A.shape[1]
    l, r = mps_linalg.fixed_points(C)
    dtype = np.result_type(A, W, C)
    Id = np.eye(D, dtype=dtype)
    B = np.zeros((D, D, chi), dtype=dtype)

    if direction == "l":
        B[:, :, chi-1] = Id
        channels = range(chi-2, -1, -1)
        final = 0
    else:
        B[:, :, 0] = Id
        channels = range(1, chi)
        final = chi - 1

    e = 0.
    for c in channels:
        if direction == "l":
            Y = ct.mpo_XopL(B[:, :, c+1:], A, W[c+1:, c:c+1])[:, :, 0]
        else:
            Y = ct.mpo_XopR(B[:, :, :c], A, W[c:c+1, :c])[:, :, 0]
        x0 = _warm_start(B_old, B.shape, channel=c)

        if c == final:
            if direction == "l":
                e = ct.proj(Y, r).item()
                op = LH_linear_operator(A, r)
            else:
                e = ct.proj(l, Y).item()
                op = RH_linear_operator(A, l)
            B[:, :, c] = call_solver(op, Y - e*Id, x0, params)
        elif H.diag[c] == 0:
            B[:, :, c] = Y
        else:
            if direction == "l":
                op = LH_linear_operator(A, r, lam=H.diag[c], project=False)
            else:
                op = RH_linear_operator(A, l, lam=H.diag[c], project=False)
            B[:, :, c] = call_solver(op, Y, x0, params)
    return (B, e)


def fixedblock_generic(H, A, direction, heff_params, B_old=None):
    """
    The dominant (largest magnitude) eigenvector of the MPO transfer map,
    whose eigenvalue is the 'energy' per site.

    RETURNS
    -------
    B (array, (D, D, chi)): The environment block, unit norm.
    e (scalar): The dominant eigenvalue.
    """
    W = H.W
    D = A.shape[1]
    shape = (D, D, H.chi)
    dtype = np.result_type(A, W)
    if direction == "l":
        op = krylov.sparse_solver_op(ct.mpo_XopL, shape, A, W, dtype=dtype)
    else:
        op = krylov.sparse_solver_op(ct.mpo_XopR, shape, A, W, dtype=dtype)

    v0 = _warm_start(B_old, shape)
    if v0 is None:
        v0, = mps_linalg.random_tensors([shape], dtype=dtype)
    solver = "dense" if heff_params["solver"] == "dense" else "arpack"
    params = {**heff_params, "solver": solver}
    e, v = krylov.eigensolve(op, v0, params, mode="lm")
    return (v.reshape(shape), e)


def fixedblock(H, A, direction, env_params, heff_params, C, B_old=None):
    """
    The left (direction "l", A = A_L) or right (direction "r", A = A_R)
    environment block of the operator H, and the energy per site it
    implies.

    PARAMETERS
    ----------
    H (Operator): The operator.
    A (array, (D, D, d)): A_L or A_R.
    direction (str): "l" or "r".
    env_params (dict): Linear solver parameters.
    heff_params (dict): Eigensolver parameters (generic mode).
    C (array, (D, D)): The gauge matrix, used to approximate the transfer
                       map fixed points.
    B_old (array): The previous block, used as the initial guess.

    RETURNS
    -------
    B (array): The block; (D, D) for two-site operators, (D, D, chi)
               otherwise.
    e (scalar): Energy per site.
    """
    if direction not in ("l", "r"):
        raise ValueError("Unrecognized direction " + str(direction) + ".")
    if H.mode == "twosite":
        return fixedblock_twosite(H.W, A, direction, env_params, C, B_old)
    if H.mode == "schur":
        return fixedblock_schur(H, A, direction, env_params, C, B_old)
    if H.mode == "generic":
        return fixedblock_generic(H, A, direction, heff_params, B_old)
    raise ValueError("Unrecognized mode " + str(H.mode) + ".")


def update_environments(mpslist, H, env_params, heff_params, blocks=None):
    """
    Recomputes both environment blocks. The previous blocks, if given,
    seed the solvers.

    In generic mode the blocks are normalized so that their contraction
    with C and C* has unit magnitude, and the energy is the real part of
    the mean eigenvalue.

    RETURNS
    -------
    blocks = [B_left, B_right]
    energy (scalar): Mean of the left and right energy estimates.
    """
    A_L, C, A_R = mpslist
    if blocks is None:
        blocks = [None, None]
    B_left, e_left = fixedblock(H, A_L, "l", env_params, heff_params, C,
                                B_old=blocks[0])
    B_right, e_right = fixedblock(H, A_R, "r", env_params, heff_params, C,
                                  B_old=blocks[1])
    energy = (e_left + e_right) / 2

    if H.mode == "generic":
        B_norm = np.sqrt(np.abs(ct.mpo_block_norm(B_left, C, B_right)))
        B_left = B_left / B_norm
        B_right = B_right / B_norm
        if env_params["verbose"] and abs(np.imag(energy)) > 1E-10*abs(energy):
            print("Warning: discarding imaginary part "
                  + str(np.imag(energy)) + " of the energy.")
        energy = float(np.real(energy))
    else:
        energy = _real_if_close(energy)
    return ([B_left, B_right], energy)


def expand_blocks(blocks, D_new):
    """
    Zero pads the bond indices of the blocks to D_new, for use as initial
    guesses after the bond dimension grows.
    """
    new_blocks = []
    for B in blocks:
        dD = D_new - B.shape[0]
        pad = [(0, dD), (0, dD)] + [(0, 0)]*(B.ndim - 2)
        new_blocks.append(np.pad(B, pad))
    return new_blocks
