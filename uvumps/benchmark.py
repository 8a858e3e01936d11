import time


def tick():
    return time.perf_counter()


def tock(t0, dat=None):
    """
    Seconds elapsed since t0. If dat is an asynchronously dispatched Jax
    array, waits for it first.
    """
    if dat is not None and hasattr(dat, "block_until_ready"):
        _ = dat.block_until_ready()
    return time.perf_counter() - t0
