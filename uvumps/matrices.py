"""
This module contains functions that return some particular matrix or operator,
notably including Pauli matrices, Hamiltonians in the encodings vumps
accepts, and exactly known energies to compare against.
"""
import numpy as np
from scipy.integrate import quad

import uvumps.contractions as ct

###############################################################################
# PAULI MATRICES
###############################################################################


def sigX(dtype=np.float64):
    """
    Pauli X matrix.

    PARAMETERS
    ----------
    dtype: the data type of the return value.
    """
    vals = [[0, 1],
            [1, 0]]
    X = np.array(vals, dtype=dtype)
    return X


def sigY(dtype=np.complex128):
    """
    Pauli Y matrix.

    PARAMETERS
    ----------
    dtype: the data type of the return value.
    """
    vals = [[0, -1],
            [1, 0]]
    Y = 1.0j*np.array(vals, dtype=dtype)
    return Y


def sigZ(dtype=np.float64):
    """
    Pauli Z matrix.

    PARAMETERS
    ----------
    dtype: the data type of the return value.
    """
    vals = [[1, 0],
            [0, -1]]
    Z = np.array(vals, dtype=dtype)
    return Z


def spin_half():
    """
    The spin-1/2 operators (Sx, Sy, Sz), half the Pauli matrices.
    """
    return (sigX()/2, sigY()/2, sigZ()/2)


###############################################################################
# HAMILTONIANS
###############################################################################
def H_ising_schur(h):
    """
    The transverse field Ising chain H = -sum Sz Sz - h sum Sx, as a
    lower triangular operator valued matrix for mode "schur".
    """
    Sx, _, Sz = spin_half()
    return [[1, None, None],
            [-Sz, None, None],
            [-h*Sx, Sz, 1]]


def H_ising_twosite(h):
    """
    The transverse field Ising chain H = -sum Sz Sz - h sum Sx, as a
    (2, 2, 2, 2) nearest neighbour term for mode "twosite". The field is
    split evenly between the two sites.
    """
    Sx, _, Sz = spin_half()
    eye = np.eye(2)
    H = -np.kron(Sz, Sz) - (h/2) * (np.kron(Sx, eye) + np.kron(eye, Sx))
    return H.reshape((2, 2, 2, 2))


def H_xxz_schur(delta):
    """
    The XXZ chain H = sum (Delta Sz Sz - Sy Sy - Sx Sx), as a lower
    triangular operator valued matrix for mode "schur". This is the
    antiferromagnetic chain after rotating every second spin about z.
    """
    Sx, Sy, Sz = spin_half()
    return [[1, None, None, None, None],
            [Sz, None, None, None, None],
            [-Sy, None, None, None, None],
            [-Sx, None, None, None, None],
            [None, delta*Sz, Sy, Sx, 1]]


def ising_classical_mpo(beta):
    """
    The row to row transfer matrix of the classical 2D Ising model at
    inverse temperature beta, as a (2, 2, 2, 2) MPO for mode "generic".
    Its dominant eigenvalue per site is the partition function per site.
    """
    Q = np.array([[np.exp(beta), np.exp(-beta)],
                  [np.exp(-beta), np.exp(beta)]])
    w, U = np.linalg.eigh(Q)
    sqrtQ = U @ np.diag(np.sqrt(w)) @ U.T
    delta = np.zeros((2, 2, 2, 2))
    for i in range(2):
        delta[i, i, i, i] = 1.
    return ct.ncon([delta, sqrtQ, sqrtQ, sqrtQ, sqrtQ],
                   [[1, 2, 3, 4], [1, -1], [2, -2], [3, -3], [4, -4]])


###############################################################################
# EXACT ENERGIES
###############################################################################
def ising_exact_energy(h):
    """
    Ground state energy per site of H_ising_schur(h).
    """
    E, _ = quad(lambda k: -np.sqrt(0.25 + h**2 + h*np.cos(k))/(2*np.pi),
                0, np.pi, epsabs=1E-14, epsrel=1E-14)
    return E


def xxz_exact_energy(delta):
    """
    Ground state energy per site of H_xxz_schur(delta), for
    -1 < delta <= 1, from the Bethe ansatz.
    """
    if delta == 1:
        return 0.25 - np.log(2)
    if not -1 < delta < 1:
        raise ValueError("The exact XXZ energy is only implemented for "
                         "-1 < delta <= 1.")
    gamma = np.arccos(delta)

    def integrand(x):
        if x == 0:
            return 1. - gamma/np.pi
        return 1. - np.tanh(x*gamma)/np.tanh(x*np.pi)

    integral, _ = quad(integrand, 0, np.inf, epsabs=1E-13, epsrel=1E-13,
                       limit=200)
    return delta/4 - np.sin(gamma)*integral


def ising_classical_logz(beta):
    """
    Onsager's free energy: log of the partition function per site of the
    classical 2D Ising model at inverse temperature beta.
    """
    k = 2*np.sinh(2*beta) / np.cosh(2*beta)**2
    integral, _ = quad(
        lambda theta: np.log((1 + np.sqrt(1 - k**2*np.sin(theta)**2))/2),
        0, np.pi/2, epsabs=1E-14, epsrel=1E-14)
    return np.log(2*np.cosh(2*beta)) + integral/np.pi
