"""
Variational uniform matrix product states (VUMPS).

Finds the extremal eigenvector of a translation invariant one dimensional
operator (a Schur form or generic MPO, or a two-site Hamiltonian) as an
MPS in mixed canonical form. The entry point is uvumps.vumps.vumps.
"""
__version__ = "0.1.0"
