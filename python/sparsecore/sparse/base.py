"""Base classes for sparse matrices.

These classes define the minimal interface shared by the concrete sparse
types in `sparsecore.sparse`: shape/dtype bookkeeping and dense
materialization.
"""

import numbers

import numpy as np


def is_scalar(x):
    """True for Python and numpy real scalars (not bool)."""
    return isinstance(x, numbers.Real) and not isinstance(x, (bool, np.bool_))


class SparseArray:
    """Abstract base class for sparse arrays.

    Parameters
    ----------
    shape : tuple[int, ...]
        Array shape. Stored as a tuple of ints.
    dtype : Any, optional
        Element dtype metadata.

    Attributes
    ----------
    shape : tuple[int, ...]
        Array shape.
    ndim : int
        Number of dimensions, equal to ``len(shape)``.
    dtype : Any
        Element type metadata.
    """

    def __init__(self, shape, dtype=None):
        shape = tuple(int(s) for s in shape)
        if any(s < 0 for s in shape):
            raise ValueError("shape entries must be non-negative")
        self.shape = shape
        self.ndim = len(self.shape)
        self.dtype = dtype


class SparseMatrix(SparseArray):
    """Abstract base class for 2D sparse matrices.

    Parameters
    ----------
    shape : tuple[int, int]
        Matrix shape. Must be two-dimensional.
    dtype : Any, optional
        Element dtype metadata.

    Raises
    ------
    ValueError
        If ``shape`` is not 2D.
    """

    def __init__(self, shape, dtype=None):
        if len(shape) != 2:
            raise ValueError("SparseMatrix requires 2D shape")
        super().__init__(shape, dtype=dtype)

    @property
    def nrows(self):
        return self.shape[0]

    @property
    def ncols(self):
        return self.shape[1]

    def _check_index(self, i, j):
        if not (0 <= i < self.shape[0] and 0 <= j < self.shape[1]):
            raise IndexError(f"index ({i}, {j}) out of bounds for shape {self.shape}")

    def toarray(self):
        """Return a dense numpy.ndarray with the same shape and dtype.

        Notes
        -----
        The base implementation returns an all-zeros array. Concrete sparse
        matrix types override this to materialize actual data.
        """
        return np.zeros(self.shape, dtype=self.dtype)
