"""Arithmetic on sparse matrices.

These functions are the checked entry points behind the operators of
:class:`~sparsecore.sparse.CSR` and :class:`~sparsecore.sparse.CSC`
(``+``, ``-``, ``*``, ``@``). Every function validates operand shapes first and
raises :class:`~sparsecore.errors.DimensionMismatch` before producing any
output.

Results keep the format of the left operand. A right operand in the other
compressed orientation (or in COO form) is converted first.
"""

import logging

import numpy as np

from ._kernels import arith
from .errors import DimensionMismatch
from .sparse._compressed import CompressedMatrix
from .sparse.base import is_scalar
from .sparse.coo import COO

logger = logging.getLogger(__name__)


def _require_compressed(x, name):
    if not isinstance(x, CompressedMatrix):
        raise TypeError(f"{name} must be a CSR or CSC matrix, got {type(x).__name__}")


def _like(a, b):
    """Return ``b`` in the same compressed format as ``a``."""
    if type(b) is type(a):
        return b
    if a._row_major:
        return b.to_csr()
    return b.to_csc()


def _combine(a, b, beta):
    _require_compressed(a, "a")
    _require_compressed(b, "b")
    if a.shape != b.shape:
        raise DimensionMismatch(a.shape, b.shape)
    b = _like(a, b)
    pattern, values = arith.add_compressed(a.pattern, a.data, b.pattern, b.data, 1.0, beta)
    return type(a).from_pattern_and_values(pattern, values)


def add(a, b):
    """Return ``a + b``.

    The result pattern is the union of both patterns and is always newly built.

    Raises
    ------
    DimensionMismatch
        If the shapes differ.
    """
    return _combine(a, b, 1.0)


def sub(a, b):
    """Return ``a - b``. Positions stored in both operands stay stored even if
    the difference is zero; use ``eliminate_zeros`` to drop them."""
    return _combine(a, b, -1.0)


def scale(a, alpha):
    """Return ``alpha * a`` as a new matrix sharing ``a``'s pattern."""
    _require_compressed(a, "a")
    if not is_scalar(alpha):
        raise TypeError("alpha must be a scalar")
    values = a.data.copy()
    arith.scale(values, float(alpha))
    return a.with_values(values)


def transpose(a):
    """Return the transpose of ``a`` in ``a``'s format."""
    _require_compressed(a, "a")
    return a.transpose()


def spmv(a, x):
    """Sparse matrix times dense vector."""
    _require_compressed(a, "a")
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError("x must be 1D")
    return matmul(a, x)


def matmul(a, b):
    """Matrix product ``a @ b``.

    Parameters
    ----------
    a : CSR or CSC
        Sparse left operand.
    b : CSR, CSC, COO or array_like
        Sparse operand, dense vector of length ``a.shape[1]``, or dense 2-D
        array with ``a.shape[1]`` rows.

    Returns
    -------
    CSR, CSC or numpy.ndarray
        Sparse product in ``a``'s format, or a dense array for dense ``b``.

    Raises
    ------
    DimensionMismatch
        If ``a.shape[1]`` differs from the leading extent of ``b``.
    ValueError
        If a dense ``b`` is not 1D or 2D.
    """
    _require_compressed(a, "a")
    if isinstance(b, COO):
        b = b.to_csr()
    if isinstance(b, CompressedMatrix):
        if a.shape[1] != b.shape[0]:
            raise DimensionMismatch(a.shape[1], b.shape[0])
        b = _like(a, b)
        if a._row_major:
            # row i of A @ B accumulates rows k of B
            pattern, values = arith.spgemm(a.pattern, a.data, b.pattern, b.data)
        else:
            # column j of A @ B accumulates columns k of A
            pattern, values = arith.spgemm(b.pattern, b.data, a.pattern, a.data)
        return type(a).from_pattern_and_values(pattern, values)

    arr = np.asarray(b, dtype=np.float64)
    if arr.ndim not in (1, 2):
        raise ValueError("right operand must be 1D or 2D")
    if arr.shape[0] != a.shape[1]:
        raise DimensionMismatch(a.shape[1], arr.shape[0])
    dense = arr if arr.ndim == 2 else arr[:, np.newaxis]
    out = arith.spmm_dense(a.pattern, a.data, dense, row_major=a._row_major)
    if arr.ndim == 1:
        return out.reshape(-1)
    return out
