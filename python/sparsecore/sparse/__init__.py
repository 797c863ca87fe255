from ._compressed import CompressedMatrix, Lane, SparseEntry
from .coo import COO
from .csc import CSC
from .csr import CSR

__all__ = [
    "CSR",
    "CSC",
    "COO",
    "CompressedMatrix",
    "Lane",
    "SparseEntry",
]
