import numpy as np

from .._kernels import convert
from ..errors import DimensionMismatch, SparseFormatError, SparseFormatErrorKind
from ..pattern import _as_index
from .base import SparseMatrix, is_scalar

_MIN_CAPACITY = 16


class COO(SparseMatrix):
    """Coordinate (COO) sparse matrix used for assembly.

    Triplets may appear in any order and the same coordinate may occur more
    than once; the matrix entry at ``(i, j)`` is the sum of all triplets with
    that coordinate. Conversion to CSR/CSC sorts and merges them.

    Parameters
    ----------
    row : array_like of int64
        Row indices for stored entries, length ``nnz``.
    col : array_like of int64
        Column indices for stored entries, length ``nnz``.
    data : array_like of float64
        Stored values, length ``nnz``.
    shape : tuple of int
        Matrix shape ``(nrows, ncols)``.
    dtype : numpy.dtype, optional
        Value dtype, defaults to ``np.float64``.
    check : bool, optional
        If True, bounds-check every coordinate against ``shape``.

    Attributes
    ----------
    row, col, data : numpy.ndarray
        Views of the stored triplets.
    shape : tuple[int, int]
        Matrix dimensions.
    nnz : int
        Number of stored triplets (duplicates counted separately).

    Raises
    ------
    DimensionMismatch
        If ``row``, ``col`` and ``data`` differ in length.
    SparseFormatError
        If ``check`` is true and a coordinate is out of bounds.

    Examples
    --------
    Assemble incrementally and compress::

        >>> from sparsecore.sparse import COO
        >>> a = COO.zeros((3, 3))
        >>> a.push(0, 0, 1.0)
        >>> a.push(0, 0, 4.0)
        >>> a.push(1, 1, 3.0)
        >>> a.to_csr().toarray().tolist()
        [[5.0, 0.0, 0.0], [0.0, 3.0, 0.0], [0.0, 0.0, 0.0]]
    """

    format = "coo"

    def __init__(self, row, col, data, shape, dtype=np.float64, check=True):
        super().__init__(shape=shape, dtype=dtype)
        row = np.array(row, dtype=np.int64).reshape(-1)
        col = np.array(col, dtype=np.int64).reshape(-1)
        data = np.array(data, dtype=np.float64).reshape(-1)
        if not (row.shape[0] == col.shape[0] == data.shape[0]):
            raise DimensionMismatch(
                data.shape[0],
                (row.shape[0], col.shape[0]),
                "row, col and data must have the same length",
            )
        if check:
            self._check_bounds(row, col)
        self._row = row
        self._col = col
        self._data = data
        self._len = int(data.shape[0])

    @classmethod
    def from_arrays(cls, row, col, data, shape, check=True):
        """Construct from index/value arrays.

        Parameters
        ----------
        row, col, data : array_like
            Coordinate indices and values.
        shape : tuple[int, int]
            Matrix shape.
        check : bool, optional
            Bounds-check the coordinates.
        """
        return cls(row, col, data, shape, check=check)

    @classmethod
    def zeros(cls, shape):
        """Empty assembler of the given shape."""
        return cls(np.empty(0), np.empty(0), np.empty(0), shape, check=False)

    def _check_bounds(self, row, col):
        nrows, ncols = self.shape
        bad = np.flatnonzero((row < 0) | (row >= nrows) | (col < 0) | (col >= ncols))
        if bad.size:
            k = int(bad[0])
            raise SparseFormatError(
                SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS,
                f"coordinate ({int(row[k])}, {int(col[k])}) is outside shape {self.shape}",
                lane=int(row[k]),
                index=int(col[k]),
            )

    def _reserve(self, extra):
        need = self._len + extra
        if need <= self._data.shape[0]:
            return
        capacity = max(_MIN_CAPACITY, need, 2 * self._data.shape[0])
        for name, dtype in (("_row", np.int64), ("_col", np.int64), ("_data", np.float64)):
            grown = np.empty(capacity, dtype=dtype)
            grown[: self._len] = getattr(self, name)[: self._len]
            setattr(self, name, grown)

    def push(self, i, j, v):
        """Append the triplet ``(i, j, v)``.

        No merging happens here; repeated coordinates are summed on
        conversion.

        Raises
        ------
        SparseFormatError
            With kind ``INDEX_OUT_OF_BOUNDS`` if ``(i, j)`` is outside the
            matrix. Nothing is appended in that case.
        TypeError
            If ``i`` or ``j`` is not an integer.
        """
        i = _as_index(i)
        j = _as_index(j)
        if not (0 <= i < self.shape[0] and 0 <= j < self.shape[1]):
            raise SparseFormatError(
                SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS,
                f"coordinate ({i}, {j}) is outside shape {self.shape}",
                lane=i,
                index=j,
            )
        self._reserve(1)
        self._row[self._len] = i
        self._col[self._len] = j
        self._data[self._len] = v
        self._len += 1

    def extend(self, rows, cols, values):
        """Append many triplets at once; all are checked before any is stored."""
        rows = np.asarray(rows, dtype=np.int64).reshape(-1)
        cols = np.asarray(cols, dtype=np.int64).reshape(-1)
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if not (rows.shape[0] == cols.shape[0] == values.shape[0]):
            raise DimensionMismatch(
                values.shape[0],
                (rows.shape[0], cols.shape[0]),
                "rows, cols and values must have the same length",
            )
        self._check_bounds(rows, cols)
        n = values.shape[0]
        self._reserve(n)
        self._row[self._len : self._len + n] = rows
        self._col[self._len : self._len + n] = cols
        self._data[self._len : self._len + n] = values
        self._len += n

    @property
    def row(self):
        return self._row[: self._len]

    @property
    def col(self):
        return self._col[: self._len]

    @property
    def data(self):
        return self._data[: self._len]

    @property
    def nnz(self):
        """Number of stored values (including duplicates)."""
        return self._len

    def __len__(self):
        return self._len

    def to_csr(self, duplicates="sum"):
        """Convert to CSR, sorting triplets and merging repeated coordinates.

        Parameters
        ----------
        duplicates : {"sum", "error"}, optional
            ``"sum"`` adds repeated coordinates; ``"error"`` raises
            ``SparseFormatError`` with kind ``DUPLICATE_ENTRY``.
        """
        from .csr import CSR

        pattern, values = convert.coo_to_compressed(
            self.row, self.col, self.data, self.shape[0], self.shape[1], duplicates
        )
        return CSR.from_pattern_and_values(pattern, values)

    def to_csc(self, duplicates="sum"):
        """Convert to CSC. See :meth:`to_csr` for ``duplicates``."""
        from .csc import CSC

        pattern, values = convert.coo_to_compressed(
            self.col, self.row, self.data, self.shape[1], self.shape[0], duplicates
        )
        return CSC.from_pattern_and_values(pattern, values)

    def __matmul__(self, other):
        """Matrix product, computed through CSR.

        - If ``other`` is 1D, returns ``(nrows,)``.
        - If ``other`` is 2D of shape ``(ncols, k)``, returns ``(nrows, k)``.
        - If ``other`` is sparse, returns a CSR.
        """
        return self.to_csr() @ other

    def sum(self, axis=None):
        """Sum of entries.

        Parameters
        ----------
        axis : {None, 0, 1}, optional
            ``None`` for global sum; ``0`` for column sums; ``1`` for row sums.
        """
        if axis is None:
            return float(self.data.sum())
        if axis == 0:
            return np.bincount(self.col, weights=self.data, minlength=self.shape[1]).astype(np.float64)
        if axis == 1:
            return np.bincount(self.row, weights=self.data, minlength=self.shape[0]).astype(np.float64)
        raise ValueError("axis must be None, 0, or 1")

    def _keep(self, mask):
        return COO(self.row[mask], self.col[mask], self.data[mask], self.shape, check=False)

    def prune(self, eps):
        """Drop triplets with ``abs(value) <= eps``.

        Returns a new :class:`COO`.
        """
        return self._keep(~(np.abs(self.data) <= float(eps)))

    def eliminate_zeros(self):
        """Remove explicit zeros. Returns a new :class:`COO`."""
        return self._keep(self.data != 0.0)

    def __mul__(self, alpha):
        """Scalar multiplication: returns ``alpha * self`` as :class:`COO`."""
        if not is_scalar(alpha):
            return NotImplemented
        return COO(self.row, self.col, self.data * float(alpha), self.shape, check=False)

    __rmul__ = __mul__

    def __truediv__(self, alpha):
        if not is_scalar(alpha):
            return NotImplemented
        return COO(self.row, self.col, self.data / float(alpha), self.shape, check=False)

    @property
    def T(self):
        """Transpose as a new :class:`COO` (triplets are not reordered)."""
        return COO(self.col, self.row, self.data, (self.shape[1], self.shape[0]), check=False)

    def toarray(self):
        """Convert to a dense NumPy ``ndarray`` of shape ``(nrows, ncols)``."""
        out = np.zeros(self.shape, dtype=np.float64)
        # accumulate duplicates
        np.add.at(out, (self.row, self.col), self.data)
        return out

    def __repr__(self):
        return f"<{self.shape[0]}x{self.shape[1]} coo matrix with {self.nnz} stored triplets>"
