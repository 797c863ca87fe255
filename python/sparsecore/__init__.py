import logging

from ._runtime import get_num_threads, get_parallel_threshold, set_num_threads, set_parallel_threshold
from .errors import (
    DimensionMismatch,
    EntryNotFound,
    SparseError,
    SparseFormatError,
    SparseFormatErrorKind,
)
from .pattern import SparsityPattern
from .sparse import COO, CSC, CSR
from . import ops as ops

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "set_num_threads",
    "get_num_threads",
    "set_parallel_threshold",
    "get_parallel_threshold",
    "SparsityPattern",
    "CSR",
    "CSC",
    "COO",
    "ops",
    "SparseError",
    "SparseFormatError",
    "SparseFormatErrorKind",
    "DimensionMismatch",
    "EntryNotFound",
]
