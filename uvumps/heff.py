"""
The effective Hamiltonians HAc and Hc, whose extremal eigenvectors are the
updated center tensor and gauge matrix.
"""
import numpy as np

import uvumps.contractions as ct
import uvumps.krylov as krylov


def apply_HAc(A_C, A_L, A_R, H, blocks):
    """
    Applies the effective Hamiltonian of the center site to A_C.
    """
    B_left, B_right = blocks
    if H.mode == "twosite":
        return ct.apply_HAc_twosite(A_C, A_L, A_R, H.W, B_left, B_right)
    return ct.apply_HAc_mpo(A_C, H.W, B_left, B_right)


def apply_Hc(C, A_L, A_R, H, blocks):
    """
    Applies the effective Hamiltonian of the bond to C.
    """
    B_left, B_right = blocks
    if H.mode == "twosite":
        return ct.apply_Hc_twosite(C, A_L, A_R, H.W, B_left, B_right)
    return ct.apply_Hc_mpo(C, B_left, B_right)


def _mode(params, isreal):
    mode = params["mode"]
    if isreal and mode == "sr":
        mode = "sa"
    return mode


###############################################################################
# Effective Hamiltonians for A_C.
###############################################################################
def minimize_HAc(mpslist, A_C, H, blocks, params, isreal=False):
    """
    The extremal eigenpair of HAc, seeded by the current A_C.
    """
    A_L, C, A_R = mpslist
    dtype = np.result_type(A_L, A_R, H.W, *blocks)
    op = krylov.sparse_solver_op(apply_HAc, A_C.shape, A_L, A_R, H, blocks,
                                 dtype=dtype)
    w, v = krylov.eigensolve(op, A_C, params, mode=_mode(params, isreal))
    return (w, v.reshape(A_C.shape))


###############################################################################
# Effective Hamiltonians for C.
###############################################################################
def minimize_Hc(mpslist, H, blocks, params, isreal=False):
    """
    The extremal eigenpair of Hc, seeded by the current C. The eigenvector
    is divided by the phase of its first element.
    """
    A_L, C, A_R = mpslist
    dtype = np.result_type(A_L, A_R, H.W, *blocks)
    op = krylov.sparse_solver_op(apply_Hc, C.shape, A_L, A_R, H, blocks,
                                 dtype=dtype)
    w, v = krylov.eigensolve(op, C, params, mode=_mode(params, isreal))
    C_prime = v.reshape(C.shape)
    if C_prime[0, 0] != 0:
        C_prime = C_prime / (C_prime[0, 0] / np.abs(C_prime[0, 0]))
    return (w, C_prime)


def solve_local(mpslist, A_C, H, blocks, params, isreal=False):
    """
    Solves both local eigenproblems.

    PARAMETERS
    ----------
    mpslist = [A_L, C, A_R]: The current state.
    A_C (array, (D, D, d)): The current center tensor.
    H (Operator): The operator.
    blocks = [B_left, B_right]: The environment blocks.
    params (dict): Eigensolver parameters, from uvumps.params.krylov_params.
    isreal (bool): If True, all tensors are real, and a search for the
                   smallest real part ("sr") uses the symmetric solver
                   ("sa").

    RETURNS
    -------
    A_C (array, (D, D, d)), C (array, (D, D)): Both of unit norm.
    """
    _, A_C = minimize_HAc(mpslist, A_C, H, blocks, params, isreal=isreal)
    _, C = minimize_Hc(mpslist, H, blocks, params, isreal=isreal)
    return (A_C, C)
