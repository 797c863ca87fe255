import numpy as np
import pytest

from sparsecore import SparseFormatError, SparseFormatErrorKind, SparsityPattern


def make_pattern():
    # structure of [[1,0,2],[0,3,0],[0,0,0]]
    return SparsityPattern(3, 3, [0, 2, 3, 3], [0, 2, 1])


def test_build_and_lookup():
    p = make_pattern()
    assert (p.major_dim, p.minor_dim, p.nnz) == (3, 3, 3)
    assert p.lane(0) == slice(0, 2)
    assert p.lane(2) == slice(3, 3)
    np.testing.assert_array_equal(p.lane_indices(0), [0, 2])
    np.testing.assert_array_equal(p.lane_lengths(), [2, 1, 0])
    np.testing.assert_array_equal(p.major_indices(), [0, 0, 1])
    assert p.entry_index(0, 0) == 0
    assert p.entry_index(0, 2) == 1
    assert p.entry_index(1, 1) == 2
    assert p.entry_index(0, 1) is None
    assert p.entry_index(2, 2) is None


def test_lookup_out_of_bounds():
    p = make_pattern()
    with pytest.raises(IndexError):
        p.lane(3)
    with pytest.raises(IndexError):
        p.entry_index(0, 3)
    with pytest.raises(IndexError):
        p.entry_index(-1, 0)


def test_lookup_rejects_non_integer_indices():
    p = make_pattern()
    with pytest.raises(TypeError):
        p.entry_index(1.5, 0)
    with pytest.raises(TypeError):
        p.entry_index(0, 2.0)
    with pytest.raises(TypeError):
        p.lane(True)
    assert p.entry_index(np.int64(0), np.int32(2)) == 1


def test_trusted_construction_leaves_caller_arrays_writable():
    offsets = np.array([0, 2, 3, 3], dtype=np.int64)
    indices = np.array([0, 2, 1], dtype=np.int64)
    p = SparsityPattern(3, 3, offsets, indices, check=False)
    assert offsets.flags.writeable
    assert indices.flags.writeable
    assert not p.major_offsets.flags.writeable
    assert not p.minor_indices.flags.writeable


def test_lane_boundaries_are_not_ordering_violations():
    p = SparsityPattern(2, 3, [0, 1, 2], [2, 0])
    assert p.nnz == 2


@pytest.mark.parametrize(
    "offsets,indices",
    [
        ([0, 2, 3], [0, 2, 1]),  # too short
        ([0, 2, 3, 3, 3], [0, 2, 1]),  # too long
        ([1, 2, 3, 3], [0, 2, 1]),  # does not start at 0
        ([0, 2, 3, 4], [0, 2, 1]),  # does not end at nnz
    ],
)
def test_invalid_offset_array(offsets, indices):
    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, offsets, indices)
    assert info.value.kind is SparseFormatErrorKind.INVALID_OFFSET_ARRAY


def test_nonmonotonic_offsets_name_lane():
    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, [0, 2, 1, 3], [0, 2, 1])
    assert info.value.kind is SparseFormatErrorKind.INVALID_OFFSET_ARRAY
    assert info.value.lane == 1


def test_index_out_of_bounds():
    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, [0, 2, 3, 3], [0, 3, 1])
    assert info.value.kind is SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS
    assert (info.value.lane, info.value.index) == (0, 3)

    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, [0, 0, 1, 1], [-1])
    assert info.value.kind is SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS
    assert info.value.lane == 1


def test_duplicate_entry():
    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, [0, 1, 3, 3], [0, 1, 1])
    assert info.value.kind is SparseFormatErrorKind.DUPLICATE_ENTRY
    assert (info.value.lane, info.value.index) == (1, 1)


def test_unsorted_lane():
    with pytest.raises(SparseFormatError) as info:
        SparsityPattern(3, 3, [0, 2, 3, 3], [2, 0, 1])
    assert info.value.kind is SparseFormatErrorKind.NONMONOTONIC_MINOR_INDICES
    assert (info.value.lane, info.value.index) == (0, 0)


def test_format_errors_are_value_errors():
    with pytest.raises(ValueError):
        SparsityPattern(1, 2, [0, 2], [1, 1])


def test_pattern_is_immutable_and_owns_its_arrays():
    offsets = np.array([0, 2, 3, 3])
    indices = np.array([0, 2, 1])
    p = SparsityPattern(3, 3, offsets, indices)
    indices[0] = 1
    assert p.minor_indices[0] == 0
    with pytest.raises(ValueError):
        p.minor_indices[0] = 1
    with pytest.raises(ValueError):
        p.major_offsets[1] = 1
    o, i = p.disassemble()
    o[1] = 1
    assert p.major_offsets[1] == 2


def test_transpose_with_permutation():
    # structure of [[1,0,2],[0,3,0]]
    p = SparsityPattern(2, 3, [0, 2, 3], [0, 2, 1])
    t, perm = p.transpose_with_permutation()
    assert (t.major_dim, t.minor_dim) == (3, 2)
    np.testing.assert_array_equal(t.major_offsets, [0, 1, 2, 3])
    np.testing.assert_array_equal(t.minor_indices, [0, 1, 0])
    np.testing.assert_array_equal(perm, [0, 2, 1])
    values = np.array([1.0, 2.0, 3.0])
    np.testing.assert_allclose(values[perm], [1.0, 3.0, 2.0])


def test_transpose_lanes_come_out_sorted():
    p = SparsityPattern(4, 3, [0, 3, 4, 6, 8], [0, 1, 2, 1, 0, 2, 1, 2])
    t = p.transpose()
    # rebuilding with validation accepts the result
    again = SparsityPattern(t.major_dim, t.minor_dim, t.major_offsets, t.minor_indices)
    assert again == t
    np.testing.assert_array_equal(t.lane_indices(1), [0, 1, 3])
    assert t.transpose() == p


def test_empty_and_identity():
    e = SparsityPattern.empty(2, 5)
    assert e.nnz == 0
    np.testing.assert_array_equal(e.major_offsets, [0, 0, 0])
    assert e.transpose() == SparsityPattern.empty(5, 2)

    eye = SparsityPattern.identity(3)
    assert eye == SparsityPattern(3, 3, [0, 1, 2, 3], [0, 1, 2])
    assert eye.transpose() == eye

    z = SparsityPattern(0, 0, [0], [])
    assert z.nnz == 0 and z.transpose() == z


def test_equality():
    assert make_pattern() == make_pattern()
    assert make_pattern() != SparsityPattern(3, 3, [0, 1, 2, 2], [0, 1])
    assert make_pattern() != SparsityPattern(3, 4, [0, 2, 3, 3], [0, 2, 1])
