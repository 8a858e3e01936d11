import numpy as np
import pytest

import uvumps.matrices as mat
import uvumps.params as params
import uvumps.vumps as vumps


H_FIELD = 0.6


@pytest.fixture(scope="session")
def tfi_schur_run():
    """
    A converged Schur form run on the transverse field Ising chain, growing
    the bond dimension from 4 to 8.
    """
    np.random.seed(10)
    vumps_params = params.vumps_params(maxit=300, tol=1E-7, mode="schur",
                                       verbose=False)
    H = mat.H_ising_schur(H_FIELD)
    return vumps.vumps(H, [4, 8], 2, vumps_params=vumps_params)
