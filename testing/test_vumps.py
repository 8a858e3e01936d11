import numpy as np
import pytest

import uvumps.drivers as drivers
import uvumps.matrices as mat
import uvumps.mps_linalg as mps_linalg
import uvumps.params as params
import uvumps.vumps as vumps

from vumps_testutils import (is_left_isometric, is_right_isometric,
                             random_mixed_canonical)


H_FIELD = 0.6


def quiet(**kwargs):
    return params.vumps_params(verbose=False, **kwargs)


###############################################################################
# The converged transverse field Ising run.
###############################################################################
def test_tfi_converges(tfi_schur_run):
    _, _, out, _, _ = tfi_schur_run
    assert out["flag"] in (0, 1)
    assert abs(out["energy"] - mat.ising_exact_energy(H_FIELD)) < 1E-5
    assert out["energyvariance"] < 1E-5
    assert out["err"] < 1E-6


def test_tfi_state(tfi_schur_run):
    (A_L, C, A_R), A_C, _, _, _ = tfi_schur_run
    assert A_L.shape == (8, 8, 2)
    assert A_R.shape == (8, 8, 2)
    assert is_left_isometric(A_L)[0]
    assert is_right_isometric(A_R)[0]
    S = np.diag(C)
    assert np.allclose(C, np.diag(S))
    assert np.all(S >= 0)
    assert np.all(np.diff(S) <= 0)
    assert abs(np.linalg.norm(C) - 1) < 1E-12
    assert mps_linalg.gauge_error(A_C, A_L, A_R, C) < 1E-6


def test_tfi_blocks(tfi_schur_run):
    _, _, _, (B_left, B_right), _ = tfi_schur_run
    assert B_left.shape == (8, 8, 3)
    assert B_right.shape == (8, 8, 3)
    assert np.allclose(B_left[:, :, 2], np.eye(8))
    assert np.allclose(B_right[:, :, 0], np.eye(8))


def test_tfi_stats(tfi_schur_run):
    _, _, out, _, stats = tfi_schur_run
    for key in ("err", "energy", "energydiff", "bond"):
        assert len(stats[key]) == out["iter"]
    assert stats["bond"][0] == 4
    assert stats["bond"][-1] == 8
    assert np.all(np.diff(stats["bond"]) >= 0)
    assert stats["err"][-1] == out["err"]
    assert stats["energy"][-1] == out["energy"]


###############################################################################
# Other encodings and models.
###############################################################################
def test_tfi_twosite():
    np.random.seed(11)
    out = drivers.vumps_ising(H_FIELD, [8], mode="twosite",
                              vumps_params=quiet(maxit=300, tol=1E-7))
    _, _, result, (LH, RH), _ = out
    assert result["flag"] in (0, 1)
    assert abs(result["energy"] - mat.ising_exact_energy(H_FIELD)) < 1E-5
    assert LH.shape == (8, 8)
    assert RH.shape == (8, 8)


def test_xxz():
    np.random.seed(12)
    delta = 0.5
    out = drivers.vumps_xxz(delta, [16], vumps_params=quiet(maxit=300,
                                                            tol=1E-6))
    result = out[2]
    assert abs(result["energy"] - mat.xxz_exact_energy(delta)) < 1E-3


def test_classical_ising():
    """
    Generic mode finds the dominant eigenvalue of the row to row transfer
    matrix, the partition function per site.
    """
    np.random.seed(13)
    beta = 0.3
    out = drivers.vumps_classical_ising(beta, [8], vumps_params=quiet(
        maxit=300, tol=1E-7))
    result = out[2]
    assert result["flag"] in (0, 1)
    assert abs(np.log(result["energy"])
               - mat.ising_classical_logz(beta)) < 1E-5


def test_iteration_cap():
    np.random.seed(14)
    out = vumps.vumps(mat.H_ising_schur(H_FIELD), [6], 2,
                      vumps_params=quiet(maxit=2))
    result, stats = out[2], out[4]
    assert result["flag"] == 2
    assert result["iter"] == 2
    assert len(stats["err"]) == 2


def test_energy_stagnation():
    """
    With an unreachable tolerance the run stops once the energy no longer
    changes.
    """
    np.random.seed(16)
    out = vumps.vumps(mat.H_ising_schur(H_FIELD), [4], 2,
                      vumps_params=quiet(maxit=400, tol=1E-300))
    result, stats = out[2], out[4]
    assert result["flag"] == 1
    assert result["iter"] < 400
    assert len(stats["err"]) == result["iter"]
    assert abs(stats["energydiff"][-1]) < np.finfo(float).eps


def test_initial_state():
    """
    A supplied initial state is used as the starting point, and grown if
    it is smaller than the first bond dimension.
    """
    np.random.seed(15)
    (A_L, C, A_R), _ = random_mixed_canonical(4, 2)
    initial = {"A_left": A_L, "A_right": A_R, "C": C}
    out = vumps.vumps(mat.H_ising_schur(H_FIELD), [6], 2,
                      vumps_params=quiet(maxit=1, initial=initial))
    (A_L, C, A_R), _, result, _, stats = out
    assert A_L.shape == (6, 6, 2)
    assert stats["bond"][0] == 6
    assert result["iter"] == 1


def test_initial_state_validation():
    (A_L, C, A_R), _ = random_mixed_canonical(4, 2)
    H = mat.H_ising_schur(H_FIELD)
    too_big = {"A_left": A_L, "A_right": A_R, "C": C}
    with pytest.raises(ValueError):
        vumps.vumps(H, [2, 8], 2, vumps_params=quiet(initial=too_big))
    mismatched = {"A_left": A_L, "A_right": A_R[:2, :2, :], "C": C}
    with pytest.raises(ValueError):
        vumps.vumps(H, [8], 2, vumps_params=quiet(initial=mismatched))
    wrong_d = {"A_left": A_L, "A_right": A_R, "C": C}
    with pytest.raises(ValueError):
        vumps.vumps(mat.H_ising_schur(H_FIELD), [8], 3,
                    vumps_params=quiet(initial=wrong_d))
    incomplete = {"A_left": A_L, "C": C}
    with pytest.raises(ValueError, match="A_right"):
        vumps.vumps(H, [8], 2, vumps_params=quiet(initial=incomplete))


@pytest.mark.parametrize("D_list", [[], [8, 4], [4, 4], [0, 4], [2.5]])
def test_invalid_bond_schedule(D_list):
    with pytest.raises(ValueError):
        vumps.vumps(mat.H_ising_schur(H_FIELD), D_list, 2,
                    vumps_params=quiet())


def test_wrong_physical_dimension():
    with pytest.raises(ValueError):
        vumps.vumps(mat.H_ising_twosite(H_FIELD), [4], 3,
                    vumps_params=quiet(mode="twosite"))


def test_multicell_not_implemented():
    H = [mat.H_ising_twosite(H_FIELD), mat.H_ising_twosite(H_FIELD)]
    with pytest.raises(NotImplementedError):
        vumps.vumps(H, [4], 2, vumps_params=quiet(mode="multicell"))


def test_grow_tolerances():
    growtol = vumps.grow_tolerances([2, 4, 8], 1E-9)
    assert np.allclose(growtol[:2], [1E-3, 1E-6])
    assert growtol[-1] == 0.
    assert vumps.grow_tolerances([4], 1E-9)[0] == 0.


def test_output_files(tmp_path):
    np.random.seed(16)
    outdir = str(tmp_path / "run")
    vumps.vumps(mat.H_ising_schur(H_FIELD), [4], 2,
                vumps_params=quiet(maxit=3, outdir=outdir))
    data = np.loadtxt(tmp_path / "run" / "data.txt")
    assert data.shape == (3, 6)
    assert np.allclose(data[:, 0], [1, 2, 3])
    assert np.allclose(data[:, 4], 4)
