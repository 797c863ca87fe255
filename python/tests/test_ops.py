import numpy as np
import pytest

from sparsecore import DimensionMismatch, ops
from sparsecore.sparse import COO, CSC, CSR


def make_simple():
    # A = [[1,0,2],[0,3,0]]
    indptr = np.array([0, 2, 3], dtype=np.int64)
    indices = np.array([0, 2, 1], dtype=np.int64)
    data = np.array([1.0, 2.0, 3.0], dtype=np.float64)
    return CSR(indptr, indices, data, (2, 3))


def test_add_is_union_of_patterns():
    A = CSR([0, 2], [0, 2], [1.0, 2.0], (1, 3))
    B = CSR([0, 2], [1, 2], [5.0, -2.0], (1, 3))
    C = ops.add(A, B)
    np.testing.assert_array_equal(C.indptr, [0, 3])
    np.testing.assert_array_equal(C.indices, [0, 1, 2])
    np.testing.assert_allclose(C.data, [1.0, 5.0, 0.0])
    D = ops.sub(A, B)
    np.testing.assert_allclose(D.toarray(), [[1.0, -5.0, 4.0]])


def test_add_mixed_orientation_keeps_left_format():
    A = make_simple()
    K = A.to_csc()
    R = A + K
    assert isinstance(R, CSR)
    np.testing.assert_allclose(R.toarray(), 2 * A.toarray())
    L = K - A
    assert isinstance(L, CSC)
    assert L.eliminate_zeros().nnz == 0


def test_add_zero_matrix_is_identity():
    A = make_simple()
    R = A + CSR.zeros(A.shape)
    assert R.pattern == A.pattern
    np.testing.assert_array_equal(R.data, A.data)


def test_add_shape_mismatch_function_and_operator():
    A = make_simple()
    B = CSR.zeros((3, 2))
    with pytest.raises(DimensionMismatch) as info:
        ops.add(A, B)
    assert info.value.expected == (2, 3)
    assert info.value.found == (3, 2)
    with pytest.raises(DimensionMismatch):
        A + B
    with pytest.raises(DimensionMismatch):
        A - B


def test_sparse_sparse_product():
    A = make_simple()
    P = A @ A.T
    assert isinstance(P, CSR)
    assert P.shape == (2, 2)
    assert P.nnz == 2
    np.testing.assert_allclose(P.toarray(), [[5.0, 0.0], [0.0, 9.0]])
    Q = ops.matmul(A.T, A)
    np.testing.assert_allclose(Q.toarray(), A.toarray().T @ A.toarray())


def test_product_keeps_cancellation_zeros():
    A = CSR([0, 2], [0, 1], [1.0, 1.0], (1, 2))
    B = CSR([0, 1, 2], [0, 0], [1.0, -1.0], (2, 1))
    P = A @ B
    assert P.nnz == 1
    assert P.get_entry(0, 0).structural
    assert P[0, 0] == 0.0
    assert P.eliminate_zeros().nnz == 0


@pytest.mark.parametrize("left", ["csr", "csc"])
@pytest.mark.parametrize("right", ["csr", "csc", "coo"])
def test_product_orientations(left, right):
    A = make_simple()
    B = CSR([0, 1, 3, 4], [1, 0, 1, 0], [2.0, -1.0, 4.0, 0.5], (3, 2))
    a = A if left == "csr" else A.to_csc()
    b = {"csr": B, "csc": B.to_csc(), "coo": B.to_coo()}[right]
    P = a @ b
    assert P.format == left
    np.testing.assert_allclose(P.toarray(), A.toarray() @ B.toarray())


def test_identity_product():
    A = make_simple()
    R = A @ CSR.eye(3)
    assert R.pattern == A.pattern
    np.testing.assert_array_equal(R.data, A.data)
    L = CSR.eye(2) @ A
    assert L.pattern == A.pattern
    np.testing.assert_array_equal(L.data, A.data)
    C = A.to_csc()
    np.testing.assert_array_equal((C @ CSC.eye(3)).data, C.data)


def test_matmul_dimension_mismatch():
    A = make_simple()
    with pytest.raises(DimensionMismatch) as info:
        A @ A
    assert (info.value.expected, info.value.found) == (3, 2)
    with pytest.raises(DimensionMismatch):
        ops.matmul(A, np.ones(2))
    with pytest.raises(DimensionMismatch):
        A @ np.ones((4, 2))
    with pytest.raises(ValueError):
        A @ np.ones((3, 1, 1))


def test_dense_product_with_empty_inner_dimension():
    np.testing.assert_array_equal(CSR.zeros((2, 0)) @ np.zeros(0), np.zeros(2))
    np.testing.assert_array_equal(CSC.zeros((2, 0)) @ np.zeros((0, 3)), np.zeros((2, 3)))
    np.testing.assert_array_equal(COO.zeros((2, 0)) @ np.zeros(0), np.zeros(2))
    np.testing.assert_array_equal(ops.spmv(CSR.zeros((2, 0)), np.zeros(0)), np.zeros(2))


def test_spmv_function():
    A = make_simple()
    np.testing.assert_allclose(ops.spmv(A, [1.0, 1.0, 1.0]), [3.0, 3.0])
    np.testing.assert_allclose(ops.spmv(A.to_csc(), [1.0, 1.0, 1.0]), [3.0, 3.0])
    with pytest.raises(ValueError):
        ops.spmv(A, np.ones((3, 1)))


def test_scale_and_transpose_functions():
    A = make_simple()
    S = ops.scale(A, -2.0)
    assert S.pattern is A.pattern
    np.testing.assert_allclose(S.data, [-2.0, -4.0, -6.0])
    np.testing.assert_allclose(A.data, [1.0, 2.0, 3.0])
    with pytest.raises(TypeError):
        ops.scale(A, A)
    np.testing.assert_allclose(ops.transpose(A).toarray(), A.toarray().T)


def test_operators_reject_unsupported_operands():
    A = make_simple()
    with pytest.raises(TypeError):
        A + 1.0
    with pytest.raises(TypeError):
        A * A
    with pytest.raises(TypeError):
        ops.add(A, A.toarray())
    with pytest.raises(TypeError):
        ops.matmul(COO.zeros((2, 3)), A.T)
