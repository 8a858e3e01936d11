"""
Interface functions for VUMPS on a few standard models.
"""
import uvumps.matrices as mat
import uvumps.params as params
import uvumps.vumps as vumps


def runvumps(H, D_list, d, vumps_params=None, heff_params=None,
             env_params=None):
    """
    Performs a vumps simulation of some operator H.

    PARAMETERS
    ----------
    H                      : The operator, encoded according to
                             vumps_params["mode"].
    D_list (list of int)   : Bond dimension schedule.
    d (int)                : Physical dimension.
    vumps_params (dict)    : Hyperparameters for the vumps solver. Formed
                             by 'vumps_params'.
    heff_params (dict)     : Hyperparameters for an eigensolve of certain
                             'effective Hamiltonians'. Formed by
                             'krylov_params()'.
    env_params (dict)      : Hyperparameters for a linear solve that finds
                             the environments. Formed by 'solver_params()'.

    RETURNS
    -------
    See vumps.vumps.
    """
    if vumps_params is None:
        vumps_params = params.vumps_params()
    return vumps.vumps(H, D_list, d, vumps_params=vumps_params,
                       heff_params=heff_params, env_params=env_params)


def _report(out, E_exact, verbose):
    E = out[2]["energy"]
    if verbose:
        print("Exact energy: " + '{0:1.16f}'.format(E_exact))
        print("Error: " + vumps.ostr(abs(E - E_exact)))


def vumps_ising(h, D_list, mode="schur", vumps_params=None,
                heff_params=None, env_params=None):
    """
    Performs a vumps simulation of the transverse field Ising model,
    H = -Sz Sz - h Sx, encoded as a Schur form MPO (mode "schur") or as
    a nearest neighbour term (mode "twosite"). Other parameters are the
    same as in runvumps.
    """
    if vumps_params is None:
        vumps_params = params.vumps_params()
    if mode == "schur":
        H = mat.H_ising_schur(h)
    elif mode == "twosite":
        H = mat.H_ising_twosite(h)
    else:
        raise ValueError("The Ising driver supports modes schur and "
                         "twosite, not " + str(mode) + ".")
    vumps_params = {**vumps_params, "mode": mode}
    out = runvumps(H, D_list, 2, vumps_params=vumps_params,
                   heff_params=heff_params, env_params=env_params)
    _report(out, mat.ising_exact_energy(h), vumps_params["verbose"])
    return out


def vumps_xxz(delta, D_list, vumps_params=None, heff_params=None,
              env_params=None):
    """
    Performs a vumps simulation of the XXZ model,
    H = Delta Sz Sz - Sy Sy - Sx Sx, as a Schur form MPO.
    Other parameters are the same as in runvumps.
    """
    if vumps_params is None:
        vumps_params = params.vumps_params()
    vumps_params = {**vumps_params, "mode": "schur"}
    out = runvumps(mat.H_xxz_schur(delta), D_list, 2,
                   vumps_params=vumps_params, heff_params=heff_params,
                   env_params=env_params)
    if -1 < delta <= 1:
        _report(out, mat.xxz_exact_energy(delta), vumps_params["verbose"])
    return out


def vumps_classical_ising(beta, D_list, vumps_params=None, heff_params=None,
                          env_params=None):
    """
    Finds the dominant eigenvector of the row to row transfer matrix of the
    classical 2D Ising model at inverse temperature beta. The returned
    'energy' is the partition function per site.
    """
    if vumps_params is None:
        vumps_params = params.vumps_params()
    if heff_params is None:
        heff_params = params.krylov_params(mode="lm")
    vumps_params = {**vumps_params, "mode": "generic"}
    out = runvumps(mat.ising_classical_mpo(beta), D_list, 2,
                   vumps_params=vumps_params, heff_params=heff_params,
                   env_params=env_params)
    if vumps_params["verbose"]:
        print("Exact log partition function per site: "
              + '{0:1.16f}'.format(mat.ising_classical_logz(beta)))
    return out
