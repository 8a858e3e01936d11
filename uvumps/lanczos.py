"""
Explicitly restarted Lanczos iteration for the extremal eigenpair of a
Hermitian linear map, in Jax. The map itself is an arbitrary Python
callable on NumPy vectors (e.g. a scipy LinearOperator's matvec), so
the Krylov loop runs eagerly while the dense steps are jitted.
"""
import numpy as np

import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)


SOFTNORMTHRESH = 1E-14


@jax.jit
def softnorm(v):
    return jnp.maximum(jnp.linalg.norm(v), SOFTNORMTHRESH)


def _apply(matvec, v):
    return jnp.asarray(matvec(np.asarray(v)))


def minimum_eigenpair(matvec, n_krylov, tol=1E-6, maxiter=10, v0=None,
                      verbose=False):
    """
    Find the algebraically minimum eigenpair of the Hermitian operator
    matvec using explicitly restarted Lanczos iteration.

    PARAMETERS
    ----------
    matvec: Hermitian operator, mapping a length-n vector to another.
    n_krylov: Size of Krylov subspace.
    tol: Error tolerance on |A psi - E psi|.
    maxiter: The program ends after this many iterations even if unconverged.
    v0: Guess vector.
    verbose: Print a warning if the solve did not converge.

    RETURNS
    -------
    E (float): The eigenvalue.
    psi (array): The normalized eigenvector, as a NumPy array.
    err (float): |A psi - E psi|.
    """
    if v0 is None:
        raise ValueError("Must supply v0.")
    v = jnp.asarray(v0)
    n_krylov = min(n_krylov, v.size)
    for _ in range(maxiter):
        E, v, err = eigenpair_iteration(matvec, v, n_krylov)
        if err < tol:
            break
    else:
        if verbose:
            print("Warning: Lanczos solve exited without converging, err=",
                  err)
    return (float(E), np.asarray(v), float(err))


def maximum_eigenpair(matvec, n_krylov, tol=1E-6, maxiter=10, v0=None,
                      verbose=False):
    """
    The algebraically maximum eigenpair, as the minimum one of -matvec.
    """
    E, v, err = minimum_eigenpair(lambda x: -matvec(x), n_krylov, tol=tol,
                                  maxiter=maxiter, v0=v0, verbose=verbose)
    return (-E, v, err)


def eigenpair_iteration(matvec, v, n_krylov):
    """
    Performs one iteration of the explicitly restarted Lanczos method.
    """
    K, T = tridiagonalize(matvec, v, n_krylov)
    E, psi = ritz_pair(K, T)
    Apsi = _apply(matvec, psi)
    err = jnp.linalg.norm(E*psi - Apsi)
    return (E, psi, err)


@jax.jit
def ritz_pair(K, T):
    Es, eVsT = jnp.linalg.eigh(T)
    psi = K @ eVsT[:, 0].astype(K.dtype)
    psi = psi / softnorm(psi)
    return (Es[0], psi)


@jax.jit
def gram_schmidt(K, v):
    """
    Orthogonalizes v against the columns of K. Unused columns of K are zero.
    """
    v = v - K @ (K.conj().T @ v)
    return v - K @ (K.conj().T @ v)


def tridiagonalize(matvec, v0, n_krylov):
    """
    Lanczos tridiagonalization with full reorthogonalization. Returns an
    n x m matrix K that orthonormally spans the Krylov space of A seeded by
    v0, and the symmetric, real and tridiagonal m x m matrix T = K^dag A K.
    m is n_krylov unless the Krylov space is exhausted sooner.

    PARAMETERS
    ----------
    matvec          : represents the linear operator.
    v0              : a length-n vector.
    n_krylov        : size of the krylov space.

    RETURNS
    -------
    K (n, m) : basis of the Krylov space.
    T (m, m) : Tridiagonal projection of A onto K.
    """
    v = v0 / softnorm(v0)
    K = jnp.zeros((v.size, n_krylov), dtype=v.dtype)
    alphas = []
    betas = []
    for k in range(n_krylov):
        K = K.at[:, k].set(v)
        Av = _apply(matvec, v)
        alphas.append(jnp.real(jnp.vdot(v, Av)))
        if k == n_krylov - 1:
            break
        w = gram_schmidt(K, Av)
        beta = jnp.linalg.norm(w)
        if beta < SOFTNORMTHRESH:
            break
        betas.append(beta)
        v = w / beta
    m = len(alphas)
    alphas = jnp.array(alphas)
    betas = jnp.array(betas[:m-1])
    T = jnp.diag(alphas)
    if m > 1:
        T = T + jnp.diag(betas, 1) + jnp.diag(betas, -1)
    return (K[:, :m], T)
