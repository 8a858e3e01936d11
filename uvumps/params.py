"""
Default arguments for the various solvers used by vumps. Each function
returns a plain dict that also documents its keys. The dicts are treated
as immutable: functions that revise a setting return a new dict.
"""
import uvumps.errors as errors


MODES = ("schur", "generic", "twosite", "multicell")
EIG_MODES = ("sr", "sa", "lr", "la", "lm", "sm")
EIG_SOLVERS = ("arpack", "lanczos", "dense")
LIN_SOLVERS = ("lgmres", "gmres", "bicgstab", "dense")


def vumps_params(maxit=100, tol=1E-10, mode="schur", isreal=True,
                 verbose=True, initial=None, outdir=None):
    """
    Bundles parameters for the vumps main loop.

    PARAMETERS
    ----------
    maxit (int)    : Maximum number of VUMPS iterations.
    tol (float)    : The run terminates successfully once the gauge error
                     drops below this at the final bond dimension.
    mode (str)     : Operator encoding; one of "schur", "generic",
                     "twosite" or "multicell".
    isreal (bool)  : Hint that all tensors may be kept real. It is
                     downgraded automatically if a complex tensor turns up.
    verbose (bool) : Print the iteration table to console.
    initial (dict) : Optional initial state with keys "A_left", "A_right"
                     and "C". None means a random start.
    outdir (str)   : Optional directory for the console and data files.

    RETURNS
    -------
    A dictionary storing each of these parameters.
    """
    errors.raise_if(errors.check_natural(maxit, "maxit"))
    errors.raise_if(errors.check_positive(tol, "tol"))
    errors.raise_if(errors.check_option(mode, "mode", MODES))
    return {"maxit": maxit, "tol": tol, "mode": mode, "isreal": isreal,
            "verbose": verbose, "initial": initial, "outdir": outdir}


def krylov_params(solver="arpack", mode="sr", tol=1E-10, dynamictol=True,
                  tol_coef=1E-3, tol_min=1E-13, n_krylov=20, max_restarts=100,
                  verbose=False):
    """
    Bundles parameters for the eigensolvers of the effective Hamiltonians
    (and of the transfer operator in generic mode).

    PARAMETERS
    ----------
    solver (str)      : "arpack" (scipy eigs/eigsh), "lanczos" (Jax) or
                        "dense".
    mode (str)        : Which extremal eigenvalue is sought; "sr", "sa",
                        "lr", "la", "lm" or "sm".
    tol (float)       : Convergence threshold.
    dynamictol (bool) : If True, tol is reset each iteration from the
                        gauge error (see update_tol).
    tol_coef (float)  : tol = max(tol_coef * err, tol_min).
    tol_min (float)   : Lower bound of the dynamic tolerance.
    n_krylov (int)    : Size of the Krylov subspace. Problems no larger
                        than this are diagonalized densely.
    max_restarts (int): Maximum number of restarts.
    verbose (bool)    : Print warnings about unconverged solves.

    RETURNS
    -------
    A dictionary storing each of these parameters.
    """
    errors.raise_if(errors.check_option(solver, "eigensolver", EIG_SOLVERS))
    errors.raise_if(errors.check_option(mode, "eigensolver mode", EIG_MODES))
    errors.raise_if(errors.check_positive(tol, "tol"))
    errors.raise_if(errors.check_natural(n_krylov, "n_krylov"))
    errors.raise_if(errors.check_natural(max_restarts, "max_restarts"))
    return {"solver": solver, "mode": mode, "tol": tol,
            "dynamictol": dynamictol, "tol_coef": tol_coef,
            "tol_min": tol_min, "n_krylov": n_krylov,
            "max_restarts": max_restarts, "verbose": verbose}


def solver_params(solver="lgmres", tol=1E-10, dynamictol=True, tol_coef=1E-3,
                  tol_min=1E-13, maxiter=100, inner_m=30, outer_k=3,
                  restart=20, dense_cutoff=64, verbose=False):
    """
    Bundles parameters for the linear solves that find the environments.

    PARAMETERS
    ----------
    solver (str)      : "lgmres", "gmres", "bicgstab" (all from
                        scipy.sparse.linalg) or "dense".
    tol (float)       : Relative residual threshold.
    dynamictol (bool) : If True, tol is reset each iteration from the
                        gauge error (see update_tol).
    tol_coef, tol_min : tol = max(tol_coef * err, tol_min).
    maxiter (int)     : Maximum number of (outer) iterations.
    inner_m (int)     : lgmres inner iterations.
    outer_k (int)     : lgmres augmentation vectors.
    restart (int)     : gmres restart length.
    dense_cutoff (int): Systems of this size or smaller are solved densely.
    verbose (bool)    : Print warnings about unconverged solves.

    RETURNS
    -------
    A dictionary storing each of these parameters.
    """
    errors.raise_if(errors.check_option(solver, "linear solver", LIN_SOLVERS))
    errors.raise_if(errors.check_positive(tol, "tol"))
    errors.raise_if(errors.check_natural(maxiter, "maxiter"))
    return {"solver": solver, "tol": tol, "dynamictol": dynamictol,
            "tol_coef": tol_coef, "tol_min": tol_min, "maxiter": maxiter,
            "inner_m": inner_m, "outer_k": outer_k, "restart": restart,
            "dense_cutoff": dense_cutoff, "verbose": verbose}


def update_tol(err, params):
    """
    Tightens the solver tolerance as the gauge error err shrinks, bounded
    below by params["tol_min"]. Returns a new dict; params is returned
    unchanged when params["dynamictol"] is False.
    """
    if not params["dynamictol"]:
        return params
    tol = max(params["tol_coef"] * err, params["tol_min"])
    return {**params, "tol": tol}
