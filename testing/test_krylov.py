import numpy as np
import pytest
from scipy.sparse.linalg import aslinearoperator

import uvumps.krylov as krylov
import uvumps.params as params

from vumps_testutils import random_tensor


N = 40


def spectrum_matrix(seed=1):
    """
    A random real symmetric matrix with an isolated lowest eigenvalue -5
    and the rest spread over [0, 10].
    """
    np.random.seed(seed)
    Q, _ = np.linalg.qr(np.random.randn(N, N))
    w = np.concatenate([[-5.], np.linspace(0, 10, N-1)])
    return Q @ np.diag(w) @ Q.T, Q[:, 0]


@pytest.mark.parametrize("solver", ["arpack", "lanczos", "dense"])
def test_eigensolve_minimum(solver):
    M, psi = spectrum_matrix()
    op = aslinearoperator(M)
    heff_params = params.krylov_params(solver=solver, tol=1E-12,
                                       max_restarts=200)
    v0 = np.random.randn(N)
    w, v = krylov.eigensolve(op, v0, heff_params, mode="sa")
    assert abs(w - (-5.)) < 1E-8
    assert abs(abs(np.vdot(v, psi)) - 1) < 1E-8
    assert abs(np.linalg.norm(v) - 1) < 1E-12


@pytest.mark.parametrize("solver", ["arpack", "dense"])
def test_eigensolve_nonhermitian_sr(solver):
    M, psi = spectrum_matrix(seed=2)
    op = aslinearoperator(M)
    heff_params = params.krylov_params(solver=solver, tol=1E-12)
    w, v = krylov.eigensolve(op, np.random.randn(N), heff_params)
    assert abs(w - (-5.)) < 1E-8
    assert not np.iscomplexobj(v)
    assert abs(abs(np.vdot(v, psi)) - 1) < 1E-8


def test_eigensolve_maximum_magnitude():
    M, _ = spectrum_matrix(seed=3)
    op = aslinearoperator(M)
    heff_params = params.krylov_params(tol=1E-12, max_restarts=500)
    w, _ = krylov.eigensolve(op, np.random.randn(N), heff_params, mode="lm")
    assert abs(w - 10.) < 1E-8


def test_small_problems_are_dense():
    """
    Problems no larger than n_krylov bypass the sparse solvers.
    """
    M = np.diag([3., 1., 2.])
    heff_params = params.krylov_params(solver="arpack", n_krylov=20)
    w, v = krylov.eigensolve(aslinearoperator(M), np.ones(3), heff_params,
                             mode="sa")
    assert abs(w - 1.) < 1E-14
    assert np.allclose(np.abs(v), [0, 1, 0])


def test_sparse_solver_op():
    np.random.seed(4)
    A = random_tensor((3, 4), np.float64)
    B = random_tensor((3, 4), np.float64)

    def func(x, scale, shift=0.):
        return scale*x*A + shift

    op = krylov.sparse_solver_op(func, (3, 4), 2., shift=1.,
                                 dtype=np.float64)
    assert op.shape == (12, 12)
    assert np.allclose(op.matvec(B.ravel()), (2*B*A + 1.).ravel())


def test_sortby():
    w = np.array([1. + 2.j, -3., 0.5, 2.])
    assert krylov.sortby(w, "sr") == 1
    assert krylov.sortby(w, "lr") == 3
    assert krylov.sortby(w, "lm") == 1
    assert krylov.sortby(w, "sm") == 2
    with pytest.raises(ValueError):
        krylov.sortby(w, "xx")


@pytest.mark.parametrize("solver", ["lgmres", "gmres", "bicgstab", "dense"])
@pytest.mark.parametrize("dtype", [np.float64, np.complex128])
def test_linsolve(solver, dtype):
    np.random.seed(5)
    n = 30
    M = np.eye(n) + 0.2*random_tensor((n, n), dtype)/np.sqrt(n)
    b = random_tensor((n,), dtype)
    env_params = params.solver_params(solver=solver, tol=1E-12,
                                      maxiter=500, dense_cutoff=0)
    x = krylov.linsolve(aslinearoperator(M), b, None, env_params)
    assert np.allclose(M @ x, b, atol=1E-9)


@pytest.mark.parametrize("mode", ["sr", "sa"])
def test_arpack_tiny_krylov_space(mode):
    """
    A Krylov space smaller than ARPACK accepts is enlarged rather than
    rejected.
    """
    M, _ = spectrum_matrix(seed=6)
    heff_params = params.krylov_params(n_krylov=2, tol=1E-10,
                                       max_restarts=5000)
    w, v = krylov.eigensolve(aslinearoperator(M), np.random.randn(N),
                             heff_params, mode=mode)
    assert v.shape == (N,)
    assert abs(w - (-5.)) < 1E-8
    assert np.allclose(M @ v, w*v, atol=1E-6)
