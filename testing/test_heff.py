import numpy as np
import pytest

import uvumps.environment as environment
import uvumps.heff as heff
import uvumps.krylov as krylov
import uvumps.matrices as mat
import uvumps.operators as operators
import uvumps.params as params

from vumps_testutils import random_mixed_canonical, random_tensor


H_FIELD = 0.6


def setup(mode, D=4, seed=1):
    np.random.seed(seed)
    if mode == "schur":
        H = operators.make_operator(mat.H_ising_schur(H_FIELD), mode, 2)
    else:
        H = operators.make_operator(mat.H_ising_twosite(H_FIELD), mode, 2)
    mpslist, A_C = random_mixed_canonical(D, 2)
    blocks, energy = environment.update_environments(
        mpslist, H, params.solver_params(), params.krylov_params())
    return H, mpslist, A_C, blocks, energy


@pytest.mark.parametrize("mode", ["schur", "twosite"])
def test_effective_hamiltonians_hermitian(mode):
    H, mpslist, A_C, blocks, _ = setup(mode)
    A_L, C, A_R = mpslist
    op = krylov.sparse_solver_op(heff.apply_HAc, A_C.shape, A_L, A_R, H,
                                 blocks, dtype=np.float64)
    M = krylov.dense_matrix(op)
    assert np.allclose(M, M.T, atol=1E-10)
    op = krylov.sparse_solver_op(heff.apply_Hc, C.shape, A_L, A_R, H,
                                 blocks, dtype=np.float64)
    M = krylov.dense_matrix(op)
    assert np.allclose(M, M.T, atol=1E-10)


def test_hc_consistent_with_hac():
    """
    For a normalized state in mixed canonical form, HAc counts the
    energy of one more site than Hc: <A_C|HAc|A_C> - <C|Hc|C> = e.
    """
    H, mpslist, A_C, blocks, energy = setup("schur", seed=2)
    A_L, C, A_R = mpslist
    HAc = heff.apply_HAc(A_C, A_L, A_R, H, blocks)
    Hc = heff.apply_Hc(C, A_L, A_R, H, blocks)
    assert abs(np.vdot(A_C, HAc) - np.vdot(C, Hc) - energy) < 1E-10


@pytest.mark.parametrize("mode", ["schur", "twosite"])
@pytest.mark.parametrize("solver", ["arpack", "lanczos", "dense"])
def test_solve_local(mode, solver):
    H, mpslist, A_C, blocks, _ = setup(mode, D=5, seed=3)
    heff_params = params.krylov_params(solver=solver, tol=1E-12,
                                       max_restarts=300)
    new_A_C, new_C = heff.solve_local(mpslist, A_C, H, blocks, heff_params,
                                      isreal=True)
    assert new_A_C.shape == A_C.shape
    assert new_C.shape == (5, 5)
    assert abs(np.linalg.norm(new_A_C) - 1) < 1E-12
    assert abs(np.linalg.norm(new_C) - 1) < 1E-12
    assert new_C[0, 0] > 0

    A_L, C, A_R = mpslist
    op = krylov.sparse_solver_op(heff.apply_HAc, A_C.shape, A_L, A_R, H,
                                 blocks, dtype=np.float64)
    E0 = np.linalg.eigvalsh(krylov.dense_matrix(op))[0]
    HAc = heff.apply_HAc(new_A_C, A_L, A_R, H, blocks)
    assert abs(np.vdot(new_A_C, HAc) - E0) < 1E-8


def test_minimize_Hc_phase():
    H, mpslist, _, blocks, _ = setup("schur", seed=4)
    mpslist = [m.astype(np.complex128) for m in mpslist]
    mpslist[1] = mpslist[1] * np.exp(1.0j*0.7)
    _, C = heff.minimize_Hc(mpslist, H, blocks,
                            params.krylov_params(solver="dense"))
    assert abs(np.imag(C[0, 0])) < 1E-12
    assert np.real(C[0, 0]) > 0


def test_minimize_HAc_eigenvector():
    H, mpslist, A_C, blocks, _ = setup("schur", seed=5)
    A_L, _, A_R = mpslist
    w, v = heff.minimize_HAc(mpslist, random_tensor(A_C.shape, np.float64),
                             H, blocks, params.krylov_params(tol=1E-12),
                             isreal=True)
    assert np.allclose(heff.apply_HAc(v, A_L, A_R, H, blocks), w*v,
                       atol=1E-8)
