"""
Helpers shared by the test modules.
"""
import numpy as np

import uvumps.contractions as ct
import uvumps.mps_linalg as mps_linalg


def random_rng(shp, low=0, high=1.0):
    return (high - low) * np.random.random_sample(shp) + low


def random_complex(shp, real_low=-1.0, real_high=1.0, imag_low=-1.0,
                   imag_high=1.0):
    """
    Return a randomized complex array of shape shp.
    """
    realpart = random_rng(shp, low=real_low, high=real_high)
    imagpart = 1.0j * random_rng(shp, low=imag_low, high=imag_high)
    return realpart + imagpart


def random_tensor(shp, dtype):
    if np.iscomplexobj(np.zeros(1, dtype=dtype)):
        return random_complex(shp).astype(dtype)
    return random_rng(shp, low=-1.0).astype(dtype)


# Utilities for testing.
def check(verbose, lhs, rhs, thresh=1E-6):
    err = np.linalg.norm(np.abs(lhs - rhs))/lhs.size
    passed = err < thresh
    if verbose:
        if passed:
            print("Passed!")
        else:
            print("Failed by ", err)
    return (passed, err)


def is_left_isometric(A_L, atol=1E-10, verbose=False):
    """
    Passes if A_L is left-isometric.
    """
    contracted = ct.XopL(A_L)
    eye = np.eye(contracted.shape[0], dtype=A_L.dtype)
    return check(verbose, contracted, eye, thresh=atol)


def is_right_isometric(A_R, atol=1E-10, verbose=False):
    """
    Passes if A_R is right-isometric.
    """
    contracted = ct.XopR(A_R)
    eye = np.eye(contracted.shape[0], dtype=A_R.dtype)
    return check(verbose, contracted, eye, thresh=atol)


def random_mixed_canonical(D, d, dtype=np.float64):
    """
    A random uMPS in exact mixed canonical form. A_L is a random isometry,
    C is the square root of the right fixed point of its transfer map, and
    A_R = C^-1 A_L C.
    """
    X = random_tensor((D*d, D), dtype)
    Q, _ = np.linalg.qr(X)
    A_L = mps_linalg.unfuse_left(Q, (D, D, d))

    T = ct.ncon([A_L, A_L.conj()], [[-1, -3, 1], [-2, -4, 1]])
    w, v = np.linalg.eig(T.reshape((D**2, D**2)))
    R = v[:, np.argmax(np.abs(w))].reshape((D, D))
    R = R / np.trace(R)
    R = (R + R.T.conj())/2
    evals, U = np.linalg.eigh(R)
    C = U @ np.diag(np.sqrt(np.abs(evals))) @ U.T.conj()
    C = C / np.linalg.norm(C)
    if not np.iscomplexobj(np.zeros(1, dtype=dtype)):
        C = C.real
    A_L = A_L.astype(dtype)
    A_R = ct.gauge_transform(np.linalg.inv(C), A_L, C)
    A_C = ct.rightmult(A_L, C)
    return ([A_L, C, A_R], A_C)


def product_state(theta):
    """
    The D = 1 uMPS cos(theta)|0> + sin(theta)|1> on every site.
    """
    A = np.array([np.cos(theta), np.sin(theta)]).reshape((1, 1, 2))
    C = np.eye(1)
    return ([A, C, A.copy()], A.copy())
