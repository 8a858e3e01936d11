"""
Linear algebra on the MPS tensors: canonical form updates, the gauge
consistency error, nullspaces and bond dimension changes. Tensors are
stored A[left, right, physical] with shape (D, D, d).
"""
import numpy as np

import uvumps.contractions as ct


def random_tensors(shapes, dtype=np.float64):
    """
    Returns a list of random tensors, one for each shape in shapes.
    Entries are standard normal; complex dtypes have random real and
    imaginary parts.
    """
    tensors = []
    for shape in shapes:
        A = np.random.randn(*shape)
        if np.iscomplexobj(np.zeros(1, dtype=dtype)):
            A = A + 1.0j * np.random.randn(*shape)
        tensors.append(A.astype(dtype))
    return tensors


def is_real(*arrays):
    """
    True iff none of the arrays has a complex dtype.
    """
    return not any(np.iscomplexobj(A) for A in arrays if A is not None)


def norm(A):
    return np.linalg.norm(A.ravel())


###############################################################################
# Reshaping.
###############################################################################
def fuse_left(A):
    """
    Joins the left and physical indices of A into the rows of a matrix.
    """
    D_l, D_r, d = A.shape
    return A.transpose((0, 2, 1)).reshape((D_l * d, D_r))


def unfuse_left(A, shape):
    D_l, D_r, d = shape
    return A.reshape((D_l, d, D_r)).transpose((0, 2, 1))


def fuse_right(A):
    """
    Joins the right and physical indices of A into the columns of a matrix.
    """
    D_l, D_r, d = A.shape
    return A.reshape((D_l, D_r * d))


def unfuse_right(A, shape):
    return A.reshape(shape)


###############################################################################
# Canonical form.
###############################################################################
def polar(a):
    """
    The unitary (isometric) factor u of the polar decomposition a = u p,
    computed from the SVD a = w s vh as u = w vh.
    """
    w, _, vh = np.linalg.svd(a, full_matrices=False)
    return w @ vh


def update_canonical(A_C, C_left, C_right=None):
    """
    Finds the left and right isometric tensors best reproducing
    A_C = A_L C_right = C_left A_R, from the polar decompositions of A_C
    and of the gauge matrices.

    PARAMETERS
    ----------
    A_C (array, (D, D, d)): The center tensor.
    C_left (array, (D, D)): Gauge matrix to the left of A_C.
    C_right (array, (D, D)): Gauge matrix to the right of A_C; defaults
                             to C_left.

    RETURNS
    -------
    A_L (array, (D, D, d)): Left isometric; fuse_left(A_L) has orthonormal
                            columns.
    A_R (array, (D, D, d)): Right isometric; fuse_right(A_R) has
                            orthonormal rows.
    """
    if C_right is None:
        C_right = C_left
    U_C_left = polar(C_left)
    U_C_right = polar(C_right)

    U_AL = polar(fuse_left(A_C))
    A_L = unfuse_left(U_AL @ U_C_right.T.conj(), A_C.shape)

    U_AR = polar(fuse_right(A_C))
    A_R = unfuse_right(U_C_left.T.conj() @ U_AR, A_C.shape)
    return (A_L, A_R)


def _absent(A):
    return A is None or np.size(A) == 0


def gauge_error(A_C, A_L, A_R, C_left, C_right=None):
    """
    The largest of the pairwise distances between A_C, A_L C_right and
    C_left A_R, divided by the square root of the number of elements of
    A_C. Any of A_C, A_L and A_R may be absent (None or empty), in which
    case the comparisons involving it are skipped; A_L and A_R cannot
    both be absent.
    """
    if _absent(A_L) and _absent(A_R):
        raise ValueError("gauge_error needs at least one of A_L and A_R.")
    if C_right is None:
        C_right = C_left

    present = []
    if not _absent(A_C):
        present.append(A_C)
    if not _absent(A_L):
        present.append(ct.rightmult(A_L, C_right))
    if not _absent(A_R):
        present.append(ct.leftmult(C_left, A_R))

    err = 0.
    for i, X in enumerate(present):
        for Y in present[i+1:]:
            err = max(err, norm(X - Y))
    return err / np.sqrt(present[0].size)


def nullspace(A, direction):
    """
    An orthonormal basis for the complement of an isometric tensor, from a
    complete QR decomposition of its fused matrix.

    PARAMETERS
    ----------
    A (array, (D, D, d)): Left isometric if direction is "l", right
                          isometric if direction is "r".
    direction (str): "l" or "r".

    RETURNS
    -------
    N (array): For "l", shape (D, (d-1)D, d) with
               sum_{l, s} N*[l, m, s] A[l, r, s] = 0.
               For "r", shape ((d-1)D, D, d) with
               sum_{r, s} N*[m, r, s] A[l, r, s] = 0.
    """
    D_l, D_r, d = A.shape
    if direction == "l":
        Q, _ = np.linalg.qr(fuse_left(A), mode="complete")
        N = Q[:, D_r:]
        return unfuse_left(N, (D_l, N.shape[1], d))
    if direction == "r":
        Q, _ = np.linalg.qr(fuse_right(A).T, mode="complete")
        N = Q[:, D_l:].T
        return N.reshape((N.shape[0], D_r, d))
    raise ValueError("Unrecognized direction " + str(direction) + ".")


def fixed_points(C):
    """
    Approximate dominant eigenvectors of the transfer maps, both trace
    normalized: l ~ C^T C* is the left fixed point of the map built from A_R,
    and r ~ C C^dag the right fixed point of the one built from A_L.
    """
    r = C @ C.T.conj()
    r = r / np.trace(r)
    l = C.T @ C.conj()
    l = l / np.trace(l)
    return (l, r)


###############################################################################
# Bond dimension changes.
###############################################################################
def _isometric_padding(n_rows, n_cols, dtype):
    """
    An (n_rows, n_cols) matrix with orthonormal columns.
    """
    X, = random_tensors([(n_rows, n_cols)], dtype=dtype)
    Q, _ = np.linalg.qr(X)
    return Q


def expand_tensors(mpslist, residual, D_new):
    """
    Embeds the mixed canonical MPS [A_L, C, A_R] into bond dimension D_new.

    The new columns of A_L (rows of A_R) are the left (right) nullspace
    directions most strongly weighted by the two-site residual
    N_L^dag H N_R^dag, i.e. its dominant singular vectors. If more are
    needed than the nullspace holds, the remainder are isometric padding
    supported on the new left (right) bond states. C is padded with zeros,
    so A_L C and C A_R are exact embeddings of the old ones.

    PARAMETERS
    ----------
    mpslist = [A_L, C, A_R]: The current state at bond dimension D.
    residual (array, ((d-1)D, (d-1)D)): The projected two-site residual,
                                        from observables.two_site_residual.
    D_new (int): New bond dimension, D_new > D.

    RETURNS
    -------
    mpslist = [A_L, C, A_R] at bond dimension D_new.
    """
    A_L, C, A_R = mpslist
    D, _, d = A_L.shape
    dD = D_new - D
    dtype = np.result_type(A_L, C, A_R, residual)

    N_L = nullspace(A_L, "l")
    N_R = nullspace(A_R, "r")
    U, _, Vh = np.linalg.svd(residual)
    n_null = min(dD, N_L.shape[1])
    NLU = ct.ncon([N_L, U[:, :n_null]], [[-1, 1, -3], [1, -2]])
    VNR = ct.ncon([Vh[:n_null, :], N_R], [[-1, 1], [1, -2, -3]])

    newA_L = np.zeros((D_new, D_new, d), dtype=dtype)
    newA_L[:D, :D, :] = A_L
    newA_L[:D, D:D+n_null, :] = NLU
    newA_R = np.zeros((D_new, D_new, d), dtype=dtype)
    newA_R[:D, :D, :] = A_R
    newA_R[D:D+n_null, :D, :] = VNR

    n_pad = dD - n_null
    if n_pad > 0:
        shape = (dD, n_pad, d)
        Q = _isometric_padding(dD * d, n_pad, dtype)
        newA_L[D:, D+n_null:, :] = unfuse_left(Q, shape)
        Q = _isometric_padding(dD * d, n_pad, dtype)
        newA_R[D+n_null:, D:, :] = Q.T.reshape((n_pad, dD, d))

    newC = np.zeros((D_new, D_new), dtype=dtype)
    newC[:D, :D] = C
    return [newA_L, newC, newA_R]


def diagonal_gauge(mpslist, A_C):
    """
    Rotates the bond basis so that C becomes diagonal, with non-negative
    entries in descending order and unit Frobenius norm (the Schmidt
    spectrum). With C = U S V^dag,
    A_L -> U^dag A_L U, A_R -> V^dag A_R V, A_C -> U^dag A_C V.
    """
    A_L, C, A_R = mpslist
    U, S, Vh = np.linalg.svd(C)
    Ud = U.T.conj()
    V = Vh.T.conj()
    A_L = ct.gauge_transform(Ud, A_L, U)
    A_R = ct.gauge_transform(Vh, A_R, V)
    A_C = ct.gauge_transform(Ud, A_C, V)
    C = np.diag(S / np.linalg.norm(S)).astype(np.result_type(A_L, C))
    return ([A_L, C, A_R], A_C)
