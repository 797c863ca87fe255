"""Numpy kernels behind the sparse matrix classes."""

from . import arith, convert

__all__ = ["arith", "convert"]
