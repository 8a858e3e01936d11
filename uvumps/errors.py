"""
ERROR MESSAGES
Functions here take a value 'val' and a name (the name of the variable).
They perform a test on val, and return a tuple (errflag, errstring).
Errflag is False iff the test passed. If it failed, errflag is True,
and errstring contains an appropriate error message.
"""
import numpy as np


def check_natural(val, name: str):
    """
    Passes when val is a natural number (an integer greater than 0).
    """
    flag = False
    errstr = ""
    if val != round(val) or val <= 0:
        flag = True
        errstr = name + " = " + str(val) + " must be a natural number."
    return (flag, errstr)


def check_positive(val, name: str):
    """
    Passes when val is a real number greater than 0.
    """
    flag = False
    errstr = ""
    if np.iscomplexobj(val) or not val > 0:
        flag = True
        errstr = name + " = " + str(val) + " must be positive."
    return (flag, errstr)


def check_ascending(vals, name: str):
    """
    Passes when vals is a nonempty, strictly increasing sequence of natural
    numbers.
    """
    flag = False
    errstr = ""
    vals = list(vals)
    if len(vals) == 0:
        return (True, name + " must be nonempty.")
    for val in vals:
        flag, errstr = check_natural(val, name + " entry")
        if flag:
            return (flag, errstr)
    if np.any(np.diff(vals) <= 0):
        flag = True
        errstr = name + " = " + str(vals) + " must be strictly increasing."
    return (flag, errstr)


def check_option(val, name: str, allowed):
    """
    Passes when val is one of the entries of allowed.
    """
    flag = False
    errstr = ""
    if val not in allowed:
        flag = True
        errstr = ("Unrecognized " + name + " " + str(val) + "; must be one of "
                  + str(list(allowed)) + ".")
    return (flag, errstr)


def check_shape(arr, shape, name: str):
    """
    Passes when arr.shape == shape.
    """
    flag = False
    errstr = ""
    if tuple(arr.shape) != tuple(shape):
        flag = True
        errstr = (name + " had shape " + str(tuple(arr.shape))
                  + " but " + str(tuple(shape)) + " was required.")
    return (flag, errstr)


def check_keys(val, keys, name: str):
    """
    Passes when the dict val has every entry of keys.
    """
    flag = False
    errstr = ""
    missing = [key for key in keys if key not in val]
    if missing:
        flag = True
        errstr = name + " is missing the keys " + str(missing) + "."
    return (flag, errstr)


def raise_if(check):
    """
    Raises ValueError with the message of a failed check.
    """
    flag, errstr = check
    if flag:
        raise ValueError(errstr)
