"""Sparse CSR matrix implementation.

This module exposes a NumPy-friendly Compressed Sparse Row matrix. Rows are
the major lanes of the underlying :class:`~sparsecore.pattern.SparsityPattern`
and column indices are stored per entry.

Notes
-----
- Index arrays (`indptr`, `indices`) are stored as read-only int64 arrays and
  validated (when `check=True`) against the canonical-structure invariants.
- Data is stored as float64 and may be modified in place.
"""

from ._compressed import CompressedMatrix


class CSR(CompressedMatrix):
    """Compressed Sparse Row (CSR) matrix.

    Parameters
    ----------
    indptr : array-like of int64, shape (n_rows + 1,)
        Row pointer array. Must be non-decreasing, start at 0, end at `nnz`.
    indices : array-like of int64, shape (nnz,)
        Column indices for each stored entry. Must be strictly increasing
        within each row.
    data : array-like of float64, shape (nnz,)
        Stored values.
    shape : tuple[int, int]
        Matrix shape (n_rows, n_cols).
    dtype : numpy.dtype, optional (default: np.float64)
        Data dtype (float64 only).
    check : bool, optional (default: True)
        When True, validate structural invariants.

    Examples
    --------
    Construct a small CSR and run basic ops::

        >>> import numpy as np
        >>> from sparsecore.sparse import CSR
        >>> indptr = np.array([0, 2, 3])  # 2 rows, 3 nnz
        >>> indices = np.array([0, 2, 1])
        >>> data = np.array([1.0, 3.0, 2.0])
        >>> a = CSR(indptr, indices, data, shape=(2, 3))
        >>> a.nnz
        3
        >>> (a @ np.array([1.0, 0.0, 1.0])).tolist()  # SpMV
        [4.0, 2.0]
        >>> a.sum()
        6.0
    """

    _row_major = True
    format = "csr"

    def row(self, i):
        """Lane ``i`` as ``Lane(index, minor_indices, values)`` (column indices)."""
        return self._lane(i)

    def to_csr(self):
        return self

    def to_csc(self):
        """Same matrix in CSC format (structural transpose of the storage)."""
        from .csc import CSC

        pattern, values = self._transposed_parts()
        return CSC.from_pattern_and_values(pattern, values)
