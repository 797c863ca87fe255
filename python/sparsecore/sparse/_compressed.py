"""Shared implementation of the compressed sparse formats (CSR and CSC).

A compressed matrix is a :class:`~sparsecore.pattern.SparsityPattern` plus a
value array aligned with the pattern's minor indices. The pattern is validated
once and never mutated; values may be rewritten in place. Operations that
change structure return a new matrix with a new pattern.

Subclasses only choose the orientation: for CSR the major lanes are rows, for
CSC they are columns. All methods here are written in terms of major/minor
indices and translate to row/column through ``_swap``.
"""

from collections import namedtuple

import numpy as np

from .._kernels import arith, convert
from ..errors import DimensionMismatch, EntryNotFound
from ..pattern import SparsityPattern
from .base import SparseMatrix, is_scalar
from .coo import COO

Lane = namedtuple("Lane", ["index", "minor_indices", "values"])

# ``structural`` is False for implicit zeros (positions absent from the pattern).
SparseEntry = namedtuple("SparseEntry", ["value", "structural"])


def _is_int(x):
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))


class CompressedMatrix(SparseMatrix):
    """Base class of :class:`~sparsecore.sparse.CSR` and :class:`~sparsecore.sparse.CSC`.

    Parameters
    ----------
    indptr : array-like of int64, shape (major_dim + 1,)
        Lane offsets.
    indices : array-like of int64, shape (nnz,)
        Minor index of each stored entry, strictly increasing within a lane.
    data : array-like of float64, shape (nnz,)
        Stored values.
    shape : tuple[int, int]
        Matrix shape (nrows, ncols).
    dtype : numpy.dtype, optional (default: np.float64)
        Data dtype (float64 only).
    check : bool, optional (default: True)
        Validate structural invariants. Only pass False for arrays that are
        known to be canonical.

    Raises
    ------
    SparseFormatError
        If ``check`` is true and the structure is invalid.
    DimensionMismatch
        If ``data`` does not have one value per stored index.
    """

    _row_major = True
    format = None

    def __init__(self, indptr, indices, data, shape, dtype=np.float64, check=True):
        shape = tuple(int(s) for s in shape)
        if len(shape) != 2:
            raise ValueError("SparseMatrix requires 2D shape")
        major_dim, minor_dim = self._swap(shape)
        pattern = SparsityPattern(major_dim, minor_dim, indptr, indices, check=check)
        self._setup(pattern, data)

    def _setup(self, pattern, values):
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1 or values.shape[0] != pattern.nnz:
            raise DimensionMismatch(
                pattern.nnz, values.shape[0] if values.ndim == 1 else values.shape,
                f"expected {pattern.nnz} values to match the pattern, found shape {values.shape}",
            )
        SparseMatrix.__init__(self, self._swap((pattern.major_dim, pattern.minor_dim)), dtype=np.float64)
        self._pattern = pattern
        self.data = values

    @classmethod
    def _swap(cls, x):
        """Swap a (row, col) pair into (major, minor) order and back."""
        return (x[0], x[1]) if cls._row_major else (x[1], x[0])

    @classmethod
    def from_arrays(cls, indptr, indices, data, shape, check=True):
        """Construct from raw arrays.

        Parameters
        ----------
        indptr, indices, data, shape, check
            See the class constructor.
        """
        return cls(indptr, indices, data, shape, check=check)

    @classmethod
    def from_pattern_and_values(cls, pattern, values):
        """Construct from an existing pattern, sharing it.

        Raises
        ------
        DimensionMismatch
            If ``len(values) != pattern.nnz``.
        """
        if not isinstance(pattern, SparsityPattern):
            raise TypeError("pattern must be a SparsityPattern")
        obj = cls.__new__(cls)
        obj._setup(pattern, values)
        return obj

    @classmethod
    def from_dense(cls, dense, zero_threshold=0.0):
        """Build from a dense 2-D array.

        Entries with ``abs(value) <= zero_threshold`` are not stored; pass
        ``zero_threshold=None`` to store every entry including zeros.
        """
        pattern, values = convert.dense_to_compressed(dense, zero_threshold, row_major=cls._row_major)
        return cls.from_pattern_and_values(pattern, values)

    @classmethod
    def zeros(cls, shape):
        """Matrix of the given shape with no stored entries."""
        major_dim, minor_dim = cls._swap(tuple(int(s) for s in shape))
        return cls.from_pattern_and_values(SparsityPattern.empty(major_dim, minor_dim), np.empty(0))

    @classmethod
    def eye(cls, n):
        """``n x n`` identity matrix."""
        return cls.from_pattern_and_values(SparsityPattern.identity(n), np.ones(int(n)))

    @classmethod
    def diag(cls, values):
        """Square matrix with ``values`` on the diagonal (zeros are stored)."""
        values = np.array(values, dtype=np.float64).reshape(-1)
        return cls.from_pattern_and_values(SparsityPattern.identity(values.shape[0]), values)

    @property
    def pattern(self):
        """The (shared, immutable) sparsity pattern."""
        return self._pattern

    @property
    def indptr(self):
        return self._pattern.major_offsets

    @property
    def indices(self):
        return self._pattern.minor_indices

    @property
    def values(self):
        """Stored values; writable, aligned with ``indices``."""
        return self.data

    @property
    def nnz(self):
        """Number of stored entries (explicit zeros included)."""
        return int(self.data.shape[0])

    def _parts(self):
        return self._pattern, self.data

    # Entry access

    def get(self, i, j, default=None):
        """Stored value at ``(i, j)``, or ``default`` if not a structural entry.

        Raises
        ------
        IndexError
            If ``(i, j)`` is outside the matrix.
        """
        self._check_index(i, j)
        k = self._pattern.entry_index(*self._swap((i, j)))
        if k is None:
            return default
        return float(self.data[k])

    def get_entry(self, i, j):
        """Return a :class:`SparseEntry` telling stored values from implicit zeros."""
        self._check_index(i, j)
        k = self._pattern.entry_index(*self._swap((i, j)))
        if k is None:
            return SparseEntry(0.0, False)
        return SparseEntry(float(self.data[k]), True)

    def set(self, i, j, value):
        """Overwrite the stored value at ``(i, j)``.

        Raises
        ------
        EntryNotFound
            If ``(i, j)`` is not a structural entry; the pattern is never
            extended in place.
        IndexError
            If ``(i, j)`` is outside the matrix.
        """
        self._check_index(i, j)
        k = self._pattern.entry_index(*self._swap((i, j)))
        if k is None:
            raise EntryNotFound(i, j)
        self.data[k] = value

    def _dense_lane(self, major):
        sl = self._pattern.lane(major)
        out = np.zeros(self._pattern.minor_dim, dtype=self.data.dtype)
        out[self._pattern.minor_indices[sl]] = self.data[sl]
        return out

    def _dense_cross_lane(self, minor):
        # slow gather across lanes
        if not 0 <= minor < self._pattern.minor_dim:
            raise IndexError("index out of bounds")
        out = np.zeros(self._pattern.major_dim, dtype=self.data.dtype)
        for lane in range(self._pattern.major_dim):
            k = self._pattern.entry_index(lane, minor)
            if k is not None:
                out[lane] = self.data[k]
        return out

    def __getitem__(self, key):
        """Read-only indexing.

        Supported forms
        ---------------
        (i, j) : int, int
            Return the scalar at (i, j); 0.0 where nothing is stored.
        (i, :) : int, slice(None)
            Return a dense row as a 1D numpy array.
        (:, j) : slice(None), int
            Return a dense column as a 1D numpy array.

        Raises
        ------
        IndexError
            If indices are out of bounds.
        NotImplementedError
            For advanced indexing.
        """
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
            if _is_int(i) and _is_int(j):
                return self.get(int(i), int(j), 0.0)
            if _is_int(i) and isinstance(j, slice) and j == slice(None):
                i = int(i)
                if not 0 <= i < self.shape[0]:
                    raise IndexError("index out of bounds")
                return self._dense_lane(i) if self._row_major else self._dense_cross_lane(i)
            if isinstance(i, slice) and i == slice(None) and _is_int(j):
                j = int(j)
                if not 0 <= j < self.shape[1]:
                    raise IndexError("index out of bounds")
                return self._dense_cross_lane(j) if self._row_major else self._dense_lane(j)
        raise NotImplementedError("only (i, j), (i, :) and (:, j) indexing is supported")

    def __setitem__(self, key, value):
        if isinstance(key, tuple) and len(key) == 2 and _is_int(key[0]) and _is_int(key[1]):
            self.set(int(key[0]), int(key[1]), value)
            return
        raise NotImplementedError("only scalar (i, j) assignment to stored entries is supported")

    def lanes(self):
        """Iterate over major lanes as ``Lane(index, minor_indices, values)``.

        ``values`` is a writable view into this matrix.
        """
        offsets = self._pattern.major_offsets
        indices = self._pattern.minor_indices
        for lane in range(self._pattern.major_dim):
            s, e = int(offsets[lane]), int(offsets[lane + 1])
            yield Lane(lane, indices[s:e], self.data[s:e])

    def _lane(self, major):
        sl = self._pattern.lane(major)
        return Lane(int(major), self._pattern.minor_indices[sl], self.data[sl])

    # Structure-preserving and structure-changing copies

    def with_values(self, values):
        """New matrix of the same type sharing this pattern with other values."""
        return type(self).from_pattern_and_values(self._pattern, values)

    def copy(self):
        """Copy of the values; the immutable pattern is shared."""
        return self.with_values(self.data.copy())

    def _keep(self, mask):
        mask = np.asarray(mask, dtype=bool)
        majors = self._pattern.major_indices()[mask]
        counts = np.bincount(majors, minlength=self._pattern.major_dim)
        offsets = np.zeros(self._pattern.major_dim + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        pattern = SparsityPattern(
            self._pattern.major_dim,
            self._pattern.minor_dim,
            offsets,
            self._pattern.minor_indices[mask],
            check=False,
        )
        return type(self).from_pattern_and_values(pattern, self.data[mask])

    def filter(self, predicate):
        """Keep the entries for which ``predicate(row, col, value)`` is true.

        Returns a new matrix with a new pattern.
        """
        majors = self._pattern.major_indices().tolist()
        minors = self._pattern.minor_indices.tolist()
        mask = np.fromiter(
            (
                bool(predicate(*self._swap((a, b)), v))
                for a, b, v in zip(majors, minors, self.data.tolist())
            ),
            dtype=bool,
            count=self.nnz,
        )
        return self._keep(mask)

    def prune(self, eps):
        """Remove entries with absolute value <= `eps`.

        Returns
        -------
        CompressedMatrix
            New matrix of the same format with pruned entries.
        """
        return self._keep(~(np.abs(self.data) <= float(eps)))

    def eliminate_zeros(self):
        """Remove explicitly stored zeros. Returns a new matrix."""
        return self._keep(self.data != 0.0)

    def disassemble(self):
        """Return copies ``(indptr, indices, data)``."""
        indptr, indices = self._pattern.disassemble()
        return indptr, indices, self.data.copy()

    # Reductions and scaling

    def sum(self, axis=None):
        """Sum stored values.

        Parameters
        ----------
        axis : {None, 0, 1}, optional
            None for total sum (scalar), 0 for column sums (length = ncols),
            1 for row sums (length = nrows).

        Raises
        ------
        ValueError
            If `axis` is not one of {None, 0, 1}.
        """
        if axis is None:
            return float(self.data.sum())
        if axis not in (0, 1):
            raise ValueError("axis must be None, 0, or 1")
        # axis=1 reduces along a row: a major reduction for CSR, minor for CSC.
        along_major = (axis == 1) == self._row_major
        if along_major:
            return np.bincount(
                self._pattern.major_indices(), weights=self.data, minlength=self._pattern.major_dim
            ).astype(np.float64)
        return np.bincount(
            self._pattern.minor_indices, weights=self.data, minlength=self._pattern.minor_dim
        ).astype(np.float64)

    def scale_(self, alpha):
        """Multiply all stored values by ``alpha`` in place and return self."""
        arith.scale(self.data, float(alpha))
        return self

    def __mul__(self, alpha):
        """Scalar multiplication. The result shares this matrix's pattern."""
        if not is_scalar(alpha):
            return NotImplemented
        from .. import ops

        return ops.scale(self, alpha)

    __rmul__ = __mul__

    def __truediv__(self, alpha):
        if not is_scalar(alpha):
            return NotImplemented
        return self.with_values(self.data / float(alpha))

    def __neg__(self):
        return self.with_values(-self.data)

    # Binary operators delegate to sparsecore.ops and raise DimensionMismatch
    # on incompatible shapes.

    def __add__(self, other):
        if not isinstance(other, CompressedMatrix):
            return NotImplemented
        from .. import ops

        return ops.add(self, other)

    def __sub__(self, other):
        if not isinstance(other, CompressedMatrix):
            return NotImplemented
        from .. import ops

        return ops.sub(self, other)

    def __matmul__(self, other):
        """Matrix product with a sparse matrix, dense vector or dense 2-D array.

        Returns
        -------
        CompressedMatrix or numpy.ndarray
            Sparse result (in this matrix's format) for a sparse operand; a
            1D or 2D array for dense operands.

        Raises
        ------
        DimensionMismatch
            If the inner dimensions differ.
        ValueError
            If a dense operand has ndim not in {1, 2}.
        """
        from .. import ops

        if isinstance(other, (CompressedMatrix, COO)):
            return ops.matmul(self, other)
        try:
            arr = np.asarray(other, dtype=np.float64)
        except (TypeError, ValueError):
            return NotImplemented
        return ops.matmul(self, arr)

    # Conversions

    def _transposed_parts(self):
        return convert.transpose_compressed(self._pattern, self.data)

    def transpose(self):
        """Transpose, returned in this matrix's format."""
        pattern, values = self._transposed_parts()
        return type(self).from_pattern_and_values(pattern, values)

    @property
    def T(self):
        """Transpose of the matrix, in the same format."""
        return self.transpose()

    def to_coo(self):
        """Expand to a :class:`~sparsecore.sparse.COO` with one triplet per stored entry."""
        major, minor, values = convert.compressed_to_coo(self._pattern, self.data)
        row, col = self._swap((major, minor))
        return COO(row, col, values, self.shape, check=False)

    def toarray(self):
        """Materialize the sparse matrix as a dense numpy.ndarray.

        Returns
        -------
        numpy.ndarray
            Dense array of shape `self.shape`.
        """
        return convert.compressed_to_dense(self._pattern, self.data, row_major=self._row_major)

    def __repr__(self):
        return f"<{self.shape[0]}x{self.shape[1]} {self.format} matrix with {self.nnz} stored entries>"
