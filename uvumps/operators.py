"""
The operator whose extremal eigenvector VUMPS seeks, tagged by encoding.

  generic : a single MPO tensor W of shape (chi, chi, d, d), indexed
            (left, right, top, bottom).
  schur   : a lower triangular chi x chi operator valued matrix, supplied
            as nested lists whose entries are None (zero), a scalar
            (multiple of the identity) or a (d, d) matrix. It is stored
            as a dense MPO together with its diagonal scalars.
  twosite : a nearest neighbour term h of shape (d, d, d, d), indexed
            (top_left, top_right, bottom_left, bottom_right).
  multicell: a list of per-site operators.
"""
from collections import namedtuple
from numbers import Number

import numpy as np

import uvumps.errors as errors
import uvumps.params as params


Operator = namedtuple("Operator", ["mode", "W", "diag", "d", "chi"])


def make_operator(H, mode, d):
    """
    Validates H against mode and returns it as an Operator.

    PARAMETERS
    ----------
    H: The operator in one of the encodings above, or an Operator, which is
       returned unchanged.
    mode (str): "schur", "generic", "twosite" or "multicell".
    d (int): Physical dimension.

    RETURNS
    -------
    H (Operator)

    RAISES
    ------
    ValueError if the mode is unrecognized or H does not fit it.
    """
    if isinstance(H, Operator):
        return H
    errors.raise_if(errors.check_option(mode, "mode", params.MODES))
    errors.raise_if(errors.check_natural(d, "d"))
    if mode == "schur":
        return schur_operator(H, d)
    if mode == "generic":
        W = np.asarray(H)
        if W.ndim != 4:
            raise ValueError("A generic MPO must have rank 4, not "
                             + str(W.ndim) + ".")
        chi = W.shape[0]
        errors.raise_if(errors.check_shape(W, (chi, chi, d, d), "MPO"))
        return Operator("generic", W, None, d, chi)
    if mode == "twosite":
        h = np.asarray(H)
        errors.raise_if(errors.check_shape(h, (d, d, d, d),
                                           "two-site operator"))
        return Operator("twosite", h, None, d, None)
    return Operator("multicell", list(H), None, d, None)


def _entry(val, d):
    """
    A dense (d, d) matrix for one Schur entry, and whether it is a scalar.
    """
    if val is None:
        return np.zeros((d, d)), True
    if isinstance(val, Number) or np.ndim(val) == 0:
        return val * np.eye(d), True
    mat = np.asarray(val)
    errors.raise_if(errors.check_shape(mat, (d, d), "Schur entry"))
    return mat, False


def schur_operator(cells, d):
    """
    Converts a lower triangular operator valued matrix into an Operator
    with mode "schur". Besides lower triangularity, the first and last
    diagonal entries must be the identity and every diagonal entry
    must be a scalar multiple of the identity.
    """
    chi = len(cells)
    if chi < 2:
        raise ValueError("A Schur form operator needs at least two channels.")
    for row in cells:
        if len(row) != chi:
            raise ValueError("A Schur form operator must be square.")

    entries = [[_entry(cells[a][c], d) for c in range(chi)]
               for a in range(chi)]
    dtype = np.result_type(*[mat for row in entries for mat, _ in row])
    W = np.zeros((chi, chi, d, d), dtype=dtype)
    diag = []
    eye = np.eye(d)
    for a in range(chi):
        for c in range(chi):
            mat, is_scalar = entries[a][c]
            if c > a and np.any(mat != 0):
                raise ValueError("Entry (" + str(a) + ", " + str(c) + ") is "
                                 "above the diagonal; a Schur form operator "
                                 "must be lower triangular.")
            if c == a:
                if not is_scalar and not np.allclose(mat, mat[0, 0] * eye):
                    raise ValueError("Diagonal entry " + str(a) + " is not a "
                                     "multiple of the identity.")
                diag.append(mat[0, 0])
            W[a, c, :, :] = mat
    if diag[0] != 1 or diag[-1] != 1:
        raise ValueError("The first and last diagonal entries of a Schur "
                         "form operator must be the identity.")
    return Operator("schur", W, diag, d, chi)


def is_complex(H):
    return np.iscomplexobj(H.W)
