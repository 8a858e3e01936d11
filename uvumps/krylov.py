"""
Interfaces to the sparse eigen- and linear solvers. Every operator is a
scipy LinearOperator acting on flattened tensors; the solver, its mode
and its tolerances are chosen by the param dicts of uvumps.params.
"""
import numpy as np
import scipy.linalg
from scipy.sparse.linalg import (LinearOperator, ArpackNoConvergence, eigs,
                                 eigsh, lgmres, gmres, bicgstab)

import uvumps.lanczos as lanczos


HERMITIAN_MODES = ("sa", "la")


def sparse_solver_op(func, arr_shape, *args, dtype=np.complex128, **kwargs):
    """
    A LinearOperator is returned that applies func(arr), in
    preparation for interface with a sparse solver.

    The solver will input a flattened arr, but func will usually expect
    a higher-rank object. The necessary shape is given as arr_shape.

    *args and **kwargs are passed to func.
    """
    flat_shape = int(np.prod(np.array(arr_shape)))
    op_shape = (flat_shape, flat_shape)

    def solver_interface(x):
        x = x.reshape(arr_shape)
        new_x = func(x, *args, **kwargs)
        new_x = new_x.flatten()
        return new_x
    op = LinearOperator(op_shape, matvec=solver_interface, dtype=dtype)
    return op


def dense_matrix(op):
    """
    The matrix of op, built column by column.
    """
    return op.matmat(np.eye(op.shape[1], dtype=op.dtype))


def sortby(w, mode):
    """
    The index of the eigenvalue in w that mode asks for.
    """
    if mode in ("sr", "sa"):
        return np.argmin(w.real)
    if mode in ("lr", "la"):
        return np.argmax(w.real)
    if mode == "lm":
        return np.argmax(np.abs(w))
    if mode == "sm":
        return np.argmin(np.abs(w))
    raise ValueError("Unrecognized eigensolver mode " + str(mode) + ".")


###############################################################################
# Eigensolvers.
###############################################################################
def dense_eigensolve(op, mode):
    mat = dense_matrix(op)
    if mode in HERMITIAN_MODES:
        w, v = np.linalg.eigh(mat)
    else:
        w, v = np.linalg.eig(mat)
    idx = sortby(w, mode)
    return (w[idx], v[:, idx])


def arpack_eigensolve(op, v0, mode, params):
    """
    A single extremal eigenpair from ARPACK. If ARPACK fails to converge
    the best Ritz pair found so far is used, or the seed if there is none.
    """
    ncv = min(max(params["n_krylov"], 3), op.shape[0])
    kwargs = {"k": 1, "which": mode.upper(), "v0": v0, "ncv": ncv,
              "tol": params["tol"], "maxiter": params["max_restarts"]}
    try:
        if mode in HERMITIAN_MODES:
            w, v = eigsh(op, **kwargs)
        else:
            w, v = eigs(op, **kwargs)
    except ArpackNoConvergence as err:
        if params["verbose"]:
            print("Warning: ARPACK did not converge.")
        w, v = err.eigenvalues, err.eigenvectors
        if len(w) == 0:
            v = v0 / np.linalg.norm(v0)
            return (np.vdot(v, op.matvec(v)), v)
    idx = sortby(w, mode)
    return (w[idx], v[:, idx])


def lanczos_eigensolve(op, v0, mode, params):
    kwargs = {"tol": params["tol"], "maxiter": params["max_restarts"],
              "v0": v0, "verbose": params["verbose"]}
    if mode in ("sa", "sr"):
        E, v, _ = lanczos.minimum_eigenpair(op.matvec, params["n_krylov"],
                                            **kwargs)
    elif mode in ("la", "lr"):
        E, v, _ = lanczos.maximum_eigenpair(op.matvec, params["n_krylov"],
                                            **kwargs)
    else:
        raise ValueError("The Lanczos solver cannot find mode " + mode + ".")
    return (E, v)


def eigensolve(op, v0, params, mode=None):
    """
    The extremal eigenpair of op selected by mode.

    PARAMETERS
    ----------
    op (LinearOperator): The operator.
    v0 (array): Initial guess; flattened internally.
    params (dict): From uvumps.params.krylov_params.
    mode (str): Overrides params["mode"] if given. "sa"/"la" assume op
                is Hermitian.

    RETURNS
    -------
    w (scalar): The eigenvalue.
    v (array): The normalized eigenvector, flattened. It is real when op
               and w are real.
    """
    if mode is None:
        mode = params["mode"]
    v0 = v0.ravel().astype(op.dtype)
    if params["solver"] == "dense" or op.shape[0] <= params["n_krylov"]:
        w, v = dense_eigensolve(op, mode)
    elif params["solver"] == "lanczos":
        w, v = lanczos_eigensolve(op, v0, mode, params)
    else:
        w, v = arpack_eigensolve(op, v0, mode, params)

    real_op = not np.iscomplexobj(np.zeros(1, dtype=op.dtype))
    if real_op and np.iscomplexobj(v):
        if abs(np.imag(w)) <= params["tol"] * max(abs(w), 1.):
            w = np.real(w)
            phase = np.angle(v[np.argmax(np.abs(v))])
            v = np.real(v * np.exp(-1.0j * phase))
    v = v / np.linalg.norm(v)
    return (w, v)


###############################################################################
# Linear solvers.
###############################################################################
def linsolve(op, b, x0, params):
    """
    Solves op x = b.

    PARAMETERS
    ----------
    op (LinearOperator): The operator.
    b (array): Right hand side; flattened internally.
    x0 (array or None): Initial guess.
    params (dict): From uvumps.params.solver_params.

    RETURNS
    -------
    x (array): The flattened solution.
    """
    b = b.ravel()
    if x0 is not None:
        x0 = x0.ravel().astype(op.dtype)
    solver = params["solver"]
    if solver == "dense" or op.shape[0] <= params["dense_cutoff"]:
        return scipy.linalg.solve(dense_matrix(op), b)

    if solver == "lgmres":
        x, info = lgmres(op, b, x0=x0, rtol=params["tol"], atol=0.,
                         maxiter=params["maxiter"],
                         inner_m=params["inner_m"],
                         outer_k=params["outer_k"])
    elif solver == "gmres":
        x, info = gmres(op, b, x0=x0, rtol=params["tol"], atol=0.,
                        restart=params["restart"],
                        maxiter=params["maxiter"])
    elif solver == "bicgstab":
        x, info = bicgstab(op, b, x0=x0, rtol=params["tol"], atol=0.,
                           maxiter=params["maxiter"])
    else:
        raise ValueError("Unrecognized linear solver " + str(solver) + ".")

    if info != 0 and params["verbose"]:
        print("Warning: " + solver + " exited with info = " + str(info) + ".")
    return x
