"""
Quantities computed from a converged (or converging) uniform MPS: the
energy variance estimate, the two-site residual it is built from, and
the entanglement of the bond.
"""
import numpy as np

import uvumps.contractions as ct
import uvumps.heff as heff
import uvumps.mps_linalg as mps_linalg


def residuals(mpslist, H, blocks):
    """
    The one- and two-site residuals of the effective Hamiltonian, projected
    into the nullspaces N_L of A_L and N_R of A_R:

      P1 = N_L^dag HAc(A_C)
      P2 = N_L^dag H2(A_C A_R) N_R^dag

    RETURNS
    -------
    P1 (array, ((d-1)D, D))
    P2 (array, ((d-1)D, (d-1)D))
    """
    A_L, C, A_R = mpslist
    B_left, B_right = blocks
    A_C = ct.rightmult(A_L, C)
    N_L = mps_linalg.nullspace(A_L, "l")
    N_R = mps_linalg.nullspace(A_R, "r")

    if H.mode == "twosite":
        P1 = ct.project_onesite(heff.apply_HAc(A_C, A_L, A_R, H, blocks), N_L)
        A2 = ct.twosite_tensor(A_C, A_R)
        A2_prime = ct.apply_HA2_twosite(A2, H.W, B_left, B_right)
        P2 = ct.project_twosite(A2_prime, N_L, N_R)
    else:
        G_left = ct.null_left_env(B_left, A_C, H.W, N_L)
        G_right = ct.null_right_env(B_right, A_R, H.W, N_R)
        P1 = ct.contract_envs(G_left, B_right)
        P2 = ct.contract_envs(G_left, G_right)
    return (P1, P2)


def two_site_residual(mpslist, H, blocks):
    """
    The projected two-site residual P2 (see residuals), whose dominant
    singular vectors are the best directions in which to grow the bond.
    """
    _, P2 = residuals(mpslist, H, blocks)
    return P2


def error_variance(mpslist, H, blocks):
    """
    Estimate of the energy variance per site, |P1|^2 + |P2|^2.
    """
    P1, P2 = residuals(mpslist, H, blocks)
    return mps_linalg.norm(P1)**2 + mps_linalg.norm(P2)**2


def entanglement_spectrum(C):
    """
    The Schmidt values across a bond, in descending order, normalized.
    """
    S = np.linalg.svd(C, compute_uv=False)
    return S / np.linalg.norm(S)


def entanglement_entropy(C):
    """
    The von Neumann entropy of a half-infinite chain.
    """
    S = entanglement_spectrum(C)
    p = S[S > 0]**2
    return float(-np.sum(p * np.log(p)))
