"""
The VUMPS main loop: alternate environment solves, local eigenproblems
and polar re-canonicalization until the gauge error falls below the
tolerance, growing the bond dimension along a schedule on the way.
"""
import numpy as np

from uvumps.writers import Writer
import uvumps.benchmark as benchmark
import uvumps.contractions as ct
import uvumps.environment as environment
import uvumps.errors as errors
import uvumps.heff as heff
import uvumps.mps_linalg as mps_linalg
import uvumps.observables as observables
import uvumps.operators as operators
import uvumps.params as params


##########################################################################
# Functions to handle output.
##########################################################################
def ostr(string):
    """
    Truncates to two decimal places.
    """
    return '{:1.2e}'.format(string)


def output(writer, Niter, delta, E, dE, D, laptime, verbose=True):
    """
    Does the actual outputting.
    """
    outstr = "N = " + str(Niter) + "| eps = " + ostr(delta)
    outstr += "| E = " + '{0:1.16f}'.format(np.real(E))
    outstr += "| dE = " + ostr(np.real(dE))
    outstr += "| D = " + str(D)
    outstr += "| dt= " + ostr(laptime)
    writer.write(outstr, verbose=verbose)

    this_output = np.array([Niter, np.real(E), np.real(dE), delta, D,
                            laptime])
    writer.data_write(this_output)


def make_writer(outdir=None):
    """
    Initialize the Writer. If outdir is given, creates a directory there,
    and a data file with headers hardcoded here as 'data_headers'. The
    Writer remembers the directory and will append to this file as the
    simulation proceeds. Otherwise it only prints.

    PARAMETERS
    ----------
    outdir (string): Path to the directory where output is to be saved. This
                     directory will be created if it does not yet exist.
                     Otherwise any contents with filename collisions during
                     the simulation will be overwritten.

    OUTPUT
    ------
    writer (writers.Writer): The Writer.
    """
    data_headers = ["N", "E", "dE", "eps", "D", "dt"]
    writer = Writer(outdir, headers=data_headers)
    return writer


###############################################################################
# Initialization.
###############################################################################
def grow_tolerances(D_list, tol):
    """
    The gauge error at which the bond dimension advances from each stage
    of D_list, logarithmically spaced between 1 and tol. The last stage
    never advances.
    """
    growtol = np.logspace(0, np.log10(tol), len(D_list)+1)[1:]
    growtol[-1] = 0.
    return growtol


def check_initial(initial, D_list, d):
    """
    Validates a user supplied initial state {"A_left", "A_right", "C"}.
    """
    errors.raise_if(errors.check_keys(initial, ("A_left", "A_right", "C"),
                                      "initial"))
    A_L = np.asarray(initial["A_left"])
    A_R = np.asarray(initial["A_right"])
    C = np.asarray(initial["C"])
    if A_L.ndim != 3:
        raise ValueError("A_left must have rank 3, not " + str(A_L.ndim)
                         + ".")
    D = A_L.shape[0]
    errors.raise_if(errors.check_shape(A_L, (D, D, d), "A_left"))
    errors.raise_if(errors.check_shape(A_R, A_L.shape, "A_right"))
    errors.raise_if(errors.check_shape(C, (D, D), "C"))
    if D > D_list[0]:
        raise ValueError("The initial bond dimension " + str(D) + " exceeds"
                         " the first entry of D_list, " + str(D_list[0])
                         + ".")
    return (A_L, C, A_R)


def vumps_initialization(D, d, isreal=True, initial=None):
    """
    The initial uMPS in mixed canonical form.

    PARAMETERS
    ----------
    D: Bond dimension of a random initial state.
    d: Physical dimension.
    isreal: If True a random initial state is real, otherwise complex.
    initial: Optional dict {"A_left", "A_right", "C"}, already validated by
             check_initial. Overrides the random initial state.

    RETURNS
    -------
    mpslist = [A_L, C, A_R]: Arrays. A_L and A_R have shape (D, D, d).
    A_C (array, (D, D, d)): The center tensor. Initially random, or A_L C
                            for a supplied state.
    isreal (bool): False if the supplied state is complex.
    """
    if initial is not None:
        A_L, C, A_R = initial
        A_C = ct.rightmult(A_L, C)
        isreal = isreal and mps_linalg.is_real(A_L, C, A_R)
        return ([A_L, C, A_R], A_C, isreal)

    dtype = np.float64 if isreal else np.complex128
    A_C, = mps_linalg.random_tensors([(D, D, d)], dtype=dtype)
    C = np.diag(np.random.rand(D)).astype(dtype)
    A_L, A_R = mps_linalg.update_canonical(A_C, C)
    return ([A_L, C, A_R], A_C, isreal)


def increase_bond(D_new, mpslist, H, blocks):
    """
    Grows the bond dimension to D_new by subspace expansion. The returned
    blocks are the old ones zero padded, to seed the next environment
    solve.
    """
    residual = observables.two_site_residual(mpslist, H, blocks)
    mpslist = mps_linalg.expand_tensors(mpslist, residual, D_new)
    A_C = ct.rightmult(mpslist[0], mpslist[1])
    blocks = environment.expand_blocks(blocks, D_new)
    return (mpslist, A_C, blocks)


###############################################################################
# Main loop and friends.
###############################################################################
def vumps(H, D_list, d, vumps_params=None, heff_params=None, env_params=None):
    """
    Find the extremal eigenvector of a translation invariant operator as a
    uniform MPS using Variational Uniform Matrix Product States.

    PARAMETERS
    ----------
    H                      : The operator, encoded according to
                             vumps_params["mode"] (see uvumps.operators).
    D_list (list of int)   : Strictly increasing bond dimension schedule.
    d (int)                : Physical dimension.

    The following arguments are bundled together by initialization functions
    in uvumps.params.

    vumps_params (dict)    : Hyperparameters for the vumps solver. Formed
                             by 'vumps_params()'.
    heff_params (dict)     : Hyperparameters for an eigensolve of certain
                             'effective Hamiltonians'. Formed by
                             'krylov_params()'.
    env_params (dict)      : Hyperparameters for a linear solve that finds
                             the environments. Formed by 'solver_params()'.

    RETURNS
    -------
    mpslist = [A_L, C, A_R]: The state in mixed canonical form, with C
                             diagonal, non-negative, descending and
                             normalized.
    A_C (array)            : The center tensor, A_L C = C A_R.
    output (dict)          : "flag" (0: converged, 1: energy stagnated,
                             2: iteration cap), "iter", "err", "energy",
                             "energyvariance".
    blocks                 : [B_left, B_right] in the final gauge.
    stats (dict)           : Per iteration arrays "err", "energy",
                             "energydiff" and "bond".
    """
    if vumps_params is None:
        vumps_params = params.vumps_params()
    if heff_params is None:
        heff_params = params.krylov_params()
    if env_params is None:
        env_params = params.solver_params()

    errors.raise_if(errors.check_natural(vumps_params["maxit"], "maxit"))
    errors.raise_if(errors.check_positive(vumps_params["tol"], "tol"))
    errors.raise_if(errors.check_ascending(D_list, "D_list"))
    H = operators.make_operator(H, vumps_params["mode"], d)
    if H.d != d:
        raise ValueError("The operator has physical dimension " + str(H.d)
                         + ", not " + str(d) + ".")
    if H.mode == "multicell":
        raise NotImplementedError("multicell operators need a multi-site "
                                  "unit cell, which vumps does not treat.")

    initial = vumps_params["initial"]
    if initial is not None:
        initial = check_initial(initial, D_list, d)
    isreal = vumps_params["isreal"] and not operators.is_complex(H)

    writer = make_writer(vumps_params["outdir"])
    mpslist, A_C, isreal = vumps_initialization(D_list[0], d, isreal=isreal,
                                                initial=initial)
    return vumps_work(H, D_list, mpslist, A_C, isreal, vumps_params,
                      heff_params, env_params, writer)


def vumps_work(H, D_list, mpslist, A_C, isreal, vumps_params, heff_params,
               env_params, writer):
    """
    Main work loop for vumps. Should be accessed via the interface
    function above.
    """
    maxit = vumps_params["maxit"]
    tol = vumps_params["tol"]
    verbose = vumps_params["verbose"]
    growtol = grow_tolerances(D_list, tol)
    bond_ind = 0

    t_total = benchmark.tick()
    A_L, C, A_R = mpslist
    err = mps_linalg.gauge_error(A_C, A_L, A_R, C)
    heff_params = params.update_tol(err, heff_params)
    env_params = params.update_tol(err, env_params)
    blocks, energy = environment.update_environments(mpslist, H, env_params,
                                                     heff_params)
    if A_L.shape[0] < D_list[0]:
        mpslist, A_C, blocks = increase_bond(D_list[0], mpslist, H, blocks)
        blocks, energy = environment.update_environments(
            mpslist, H, env_params, heff_params, blocks)
    energy_prev = energy

    writer.write("VUMPS! VUMPS! VUMPS/VUMPS/VUMPS/VUMPS! VUMPS!", verbose)
    writer.write("Operator mode: " + H.mode, verbose)
    writer.write("Initial energy: " + str(energy), verbose)
    writer.write("Initial solve time: " + ostr(benchmark.tock(t_total)),
                 verbose)

    stats = {"err": [], "energy": [], "energydiff": [], "bond": []}
    flag = 2
    for Niter in range(1, maxit+1):
        t_lap = benchmark.tick()
        if isreal and not mps_linalg.is_real(*blocks):
            isreal = False

        A_C, C = heff.solve_local(mpslist, A_C, H, blocks, heff_params,
                                  isreal=isreal)
        A_L, A_R = mps_linalg.update_canonical(A_C, C)
        mpslist = [A_L, C, A_R]
        blocks, energy = environment.update_environments(
            mpslist, H, env_params, heff_params, blocks)

        heff_params = params.update_tol(err, heff_params)
        env_params = params.update_tol(err, env_params)
        err = mps_linalg.gauge_error(A_C, A_L, A_R, C)
        energydiff = energy - energy_prev
        D = A_L.shape[0]

        laptime = benchmark.tock(t_lap, dat=A_C)
        output(writer, Niter, err, energy, energydiff, D, laptime, verbose)
        stats["err"].append(err)
        stats["energy"].append(energy)
        stats["energydiff"].append(energydiff)
        stats["bond"].append(D)

        if bond_ind == len(D_list) - 1:
            if err < tol:
                flag = 0
                writer.write("Convergence achieved at iteration "
                             + str(Niter), verbose)
                break
            if abs(energydiff) < np.finfo(float).eps:
                flag = 1
                writer.write("Energy stagnated at iteration " + str(Niter),
                             verbose)
                break
        elif err < growtol[bond_ind]:
            bond_ind += 1
            mpslist, A_C, blocks = increase_bond(D_list[bond_ind], mpslist,
                                                 H, blocks)
            blocks, _ = environment.update_environments(
                mpslist, H, env_params, heff_params, blocks)
            writer.write("Bond dimension increased to "
                         + str(D_list[bond_ind]), verbose)
        energy_prev = energy

    if flag == 2:
        writer.write("Maximum iteration " + str(maxit) + " reached.", verbose)

    out = {"flag": flag, "iter": Niter, "err": err, "energy": energy,
           "energyvariance": observables.error_variance(mpslist, H, blocks)}
    stats = {key: np.array(val) for key, val in stats.items()}

    mpslist, A_C = mps_linalg.diagonal_gauge(mpslist, A_C)
    blocks, _ = environment.update_environments(mpslist, H, env_params,
                                                heff_params, blocks)
    t_total = benchmark.tock(t_total)
    writer.write("The main loops took " + str(t_total) + " seconds.", verbose)
    return (mpslist, A_C, out, blocks, stats)
