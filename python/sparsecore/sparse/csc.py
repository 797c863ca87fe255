from ._compressed import CompressedMatrix


class CSC(CompressedMatrix):
    """Compressed Sparse Column (CSC) matrix.

    Parameters
    ----------
    indptr : array_like of int64, shape ``(ncols + 1,)``
        Column pointer array.
    indices : array_like of int64, shape ``(nnz,)``
        Row indices of stored values, strictly increasing within a column.
    data : array_like of float64, shape ``(nnz,)``
        Stored values.
    shape : tuple of int
        Matrix shape ``(nrows, ncols)``.
    dtype : numpy.dtype, optional
        Value dtype, defaults to ``np.float64``.
    check : bool, optional
        If True, validate structural invariants.

    Attributes
    ----------
    indptr, indices, data : numpy.ndarray
        Storage arrays for CSC structure and values.
    pattern : SparsityPattern
        Column-major pattern (major dimension = ncols).
    shape : tuple[int, int]
        Matrix dimensions.
    nnz : int
        Number of stored elements.

    Examples
    --------
    Construct a small CSC and run basic ops::

        >>> import numpy as np
        >>> from sparsecore.sparse import CSC
        >>> indptr = np.array([0, 1, 2, 3])
        >>> indices = np.array([0, 1, 1])
        >>> data = np.array([1.0, 2.0, 3.0])
        >>> a = CSC(indptr, indices, data, shape=(2, 3))
        >>> a.nnz
        3
        >>> (a @ np.array([1.0, 0.0, 1.0])).tolist()  # SpMV
        [1.0, 3.0]
        >>> a.sum()
        6.0
    """

    _row_major = False
    format = "csc"

    def col(self, j):
        """Lane ``j`` as ``Lane(index, minor_indices, values)`` (row indices)."""
        return self._lane(j)

    def to_csc(self):
        return self

    def to_csr(self):
        """Same matrix in CSR format."""
        from .csr import CSR

        pattern, values = self._transposed_parts()
        return CSR.from_pattern_and_values(pattern, values)
