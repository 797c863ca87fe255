import numpy as np
import pytest

from sparsecore.sparse.coo import COO
from sparsecore.sparse.csc import CSC
from sparsecore.sparse.csr import CSR


def test_csc_transpose_basic():
    # A = [[1,0,2],[0,3,0]] in CSC
    indptr = np.array([0, 1, 2, 3], dtype=np.int64)
    indices = np.array([0, 1, 0], dtype=np.int64)
    data = np.array([1.0, 3.0, 2.0], dtype=np.float64)
    A = CSC(indptr, indices, data, (2, 3))
    AT = A.T
    assert isinstance(AT, CSC)
    assert AT.shape == (3, 2)
    np.testing.assert_array_equal(AT.indptr, np.array([0, 2, 3], dtype=np.int64))
    np.testing.assert_array_equal(AT.indices, np.array([0, 2, 1], dtype=np.int64))
    np.testing.assert_allclose(AT.data, np.array([1.0, 2.0, 3.0], dtype=np.float64))
    np.testing.assert_allclose(AT.toarray(), A.toarray().T)


def test_csr_transpose_matches_dense():
    A = CSR([0, 2, 3, 5], [1, 3, 0, 0, 2], [1.0, 2.0, 3.0, 4.0, 5.0], (3, 4))
    AT = A.transpose()
    np.testing.assert_allclose(AT.toarray(), A.toarray().T)
    np.testing.assert_array_equal(AT.indptr, [0, 2, 3, 4, 5])
    np.testing.assert_array_equal(AT.indices, [1, 2, 0, 2, 0])
    np.testing.assert_allclose(AT.data, [3.0, 4.0, 1.0, 5.0, 2.0])


def test_transpose_involution():
    A = CSR([0, 2, 3, 5], [1, 3, 0, 0, 2], [1.0, 2.0, 3.0, 4.0, 5.0], (3, 4))
    B = A.T.T
    assert B.shape == A.shape
    assert B.pattern == A.pattern
    np.testing.assert_array_equal(B.data, A.data)


def test_transpose_keeps_explicit_zeros():
    A = CSR([0, 2, 2], [0, 1], [0.0, 1.0], (2, 2))
    assert A.T.nnz == 2


essentially_empty = pytest.mark.parametrize(
    "shape,indptr,indices,data",
    [
        # CSC requires indptr length == ncols + 1
        (
            (0, 0),
            np.array([0], dtype=np.int64),
            np.array([], dtype=np.int64),
            np.array([], dtype=np.float64),
        ),
        (
            (0, 3),
            np.array([0, 0, 0, 0], dtype=np.int64),
            np.array([], dtype=np.int64),
            np.array([], dtype=np.float64),
        ),
        (
            (3, 0),
            np.array([0], dtype=np.int64),
            np.array([], dtype=np.int64),
            np.array([], dtype=np.float64),
        ),
    ],
)


@essentially_empty
def test_csc_transpose_empty_cases(shape, indptr, indices, data):
    A = CSC(indptr, indices, data, shape)
    AT = A.T
    assert AT.shape == (shape[1], shape[0])
    np.testing.assert_allclose(AT.toarray(), A.toarray().T)


def test_coo_transpose_matches_dense():
    row = np.array([0, 1, 1], dtype=np.int64)
    col = np.array([0, 0, 2], dtype=np.int64)
    data = np.array([1.0, 2.0, 3.0], dtype=np.float64)
    A = COO(row, col, data, (2, 3))
    AT = A.T
    np.testing.assert_allclose(AT.toarray(), A.toarray().T)
    np.testing.assert_allclose(AT.to_csr().toarray(), A.to_csc().T.toarray())
