"""Sparsity patterns: the index skeleton of compressed sparse storage.

A :class:`SparsityPattern` records, for each major lane (a row of a CSR
matrix or a column of a CSC matrix), which minor indices hold structural
entries. Patterns are validated once at construction and are immutable
afterwards, so any number of matrices may share one pattern object and every
kernel that reads a pattern may rely on its invariants without re-checking:

- ``major_offsets`` has length ``major_dim + 1``, starts at 0, ends at ``nnz``
  and is non-decreasing;
- within each lane the minor indices are strictly increasing;
- every minor index lies in ``[0, minor_dim)``.

Notes
-----
Offsets and indices are stored as read-only int64 numpy arrays. A structural
change always means building a new pattern.
"""

import numpy as np

from .errors import SparseFormatError, SparseFormatErrorKind


def _readonly(arr):
    # freeze a view so an adopted caller array stays writable
    view = arr.view()
    view.flags.writeable = False
    return view


def _as_index(x):
    if isinstance(x, (bool, np.bool_)) or not isinstance(x, (int, np.integer)):
        raise TypeError(f"indices must be integers, got {type(x).__name__}")
    return int(x)


def _validate(major_dim, minor_dim, offsets, indices):
    """Check all pattern invariants in a single scan.

    Errors are reported for the first offending position in storage order.
    """
    if offsets.shape[0] != major_dim + 1:
        raise SparseFormatError(
            SparseFormatErrorKind.INVALID_OFFSET_ARRAY,
            f"offset array must have length major_dim + 1 = {major_dim + 1}, "
            f"found {offsets.shape[0]}",
        )
    nnz = indices.shape[0]
    if offsets[0] != 0 or offsets[-1] != nnz:
        raise SparseFormatError(
            SparseFormatErrorKind.INVALID_OFFSET_ARRAY,
            f"first offset must be 0 and last offset must equal nnz = {nnz}, "
            f"found {int(offsets[0])} and {int(offsets[-1])}",
        )
    steps = np.diff(offsets)
    decreasing = np.flatnonzero(steps < 0)
    if decreasing.size:
        lane = int(decreasing[0])
        raise SparseFormatError(
            SparseFormatErrorKind.INVALID_OFFSET_ARRAY,
            f"offsets must be non-decreasing, but lane {lane} ends at "
            f"{int(offsets[lane + 1])} before it starts at {int(offsets[lane])}",
            lane=lane,
            index=int(offsets[lane + 1]),
        )
    if nnz == 0:
        return

    out_of_bounds = np.flatnonzero((indices < 0) | (indices >= minor_dim))
    first_oob = int(out_of_bounds[0]) if out_of_bounds.size else nnz

    # An entry is out of order if it does not exceed its predecessor within
    # the same lane; the first entry of each non-empty lane has no predecessor.
    lane_start = np.zeros(nnz, dtype=bool)
    lane_start[offsets[:-1][steps > 0]] = True
    out_of_order = np.zeros(nnz, dtype=bool)
    out_of_order[1:] = indices[1:] <= indices[:-1]
    out_of_order &= ~lane_start
    unordered = np.flatnonzero(out_of_order)
    first_unordered = int(unordered[0]) if unordered.size else nnz

    k = min(first_oob, first_unordered)
    if k == nnz:
        return
    lane = int(np.searchsorted(offsets, k, side="right") - 1)
    index = int(indices[k])
    if first_oob <= first_unordered:
        raise SparseFormatError(
            SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS,
            f"minor index {index} in lane {lane} is outside [0, {minor_dim})",
            lane=lane,
            index=index,
        )
    if index == indices[k - 1]:
        raise SparseFormatError(
            SparseFormatErrorKind.DUPLICATE_ENTRY,
            f"minor index {index} appears more than once in lane {lane}",
            lane=lane,
            index=index,
        )
    raise SparseFormatError(
        SparseFormatErrorKind.NONMONOTONIC_MINOR_INDICES,
        f"minor index {index} in lane {lane} follows larger index {int(indices[k - 1])}",
        lane=lane,
        index=index,
    )


class SparsityPattern:
    """Validated, immutable compressed index structure.

    Parameters
    ----------
    major_dim : int
        Number of major lanes.
    minor_dim : int
        Extent of the minor dimension.
    major_offsets : array-like of int, shape (major_dim + 1,)
        Lane start offsets into ``minor_indices``.
    minor_indices : array-like of int, shape (nnz,)
        Minor index of every structural entry, lane by lane.
    check : bool, optional (default: True)
        Validate invariants and copy the inputs. ``check=False`` is reserved
        for kernels whose output is canonical by construction; the arrays are
        then adopted without copying. The pattern holds read-only views of
        them; the caller's arrays stay writable and must not be modified.

    Raises
    ------
    SparseFormatError
        If ``check`` is true and the structure is not canonical. No pattern is
        created in that case.

    Examples
    --------
    >>> p = SparsityPattern(3, 3, [0, 2, 3, 3], [0, 2, 1])
    >>> p.nnz
    3
    >>> p.entry_index(0, 2)
    1
    >>> p.entry_index(1, 0) is None
    True
    """

    __slots__ = ("_major_dim", "_minor_dim", "_offsets", "_indices")

    def __init__(self, major_dim, minor_dim, major_offsets, minor_indices, check=True):
        major_dim = int(major_dim)
        minor_dim = int(minor_dim)
        if major_dim < 0 or minor_dim < 0:
            raise ValueError("pattern dimensions must be non-negative")
        if check:
            offsets = np.array(major_offsets, dtype=np.int64).reshape(-1)
            indices = np.array(minor_indices, dtype=np.int64).reshape(-1)
            _validate(major_dim, minor_dim, offsets, indices)
        else:
            offsets = np.asarray(major_offsets, dtype=np.int64)
            indices = np.asarray(minor_indices, dtype=np.int64)
        self._major_dim = major_dim
        self._minor_dim = minor_dim
        self._offsets = _readonly(offsets)
        self._indices = _readonly(indices)

    @classmethod
    def from_offsets_and_indices(cls, major_dim, minor_dim, major_offsets, minor_indices):
        """Build a pattern, validating every invariant.

        Equivalent to ``SparsityPattern(..., check=True)``.
        """
        return cls(major_dim, minor_dim, major_offsets, minor_indices, check=True)

    @classmethod
    def empty(cls, major_dim, minor_dim):
        """Pattern with no structural entries."""
        offsets = np.zeros(int(major_dim) + 1, dtype=np.int64)
        return cls(major_dim, minor_dim, offsets, np.empty(0, dtype=np.int64), check=False)

    @classmethod
    def identity(cls, n):
        """Pattern of the ``n x n`` diagonal."""
        n = int(n)
        return cls(n, n, np.arange(n + 1, dtype=np.int64), np.arange(n, dtype=np.int64), check=False)

    @property
    def major_dim(self):
        return self._major_dim

    @property
    def minor_dim(self):
        return self._minor_dim

    @property
    def nnz(self):
        """Number of structural entries."""
        return int(self._indices.shape[0])

    @property
    def major_offsets(self):
        """Read-only int64 array of lane offsets."""
        return self._offsets

    @property
    def minor_indices(self):
        """Read-only int64 array of minor indices."""
        return self._indices

    def _check_major(self, i):
        if not 0 <= i < self._major_dim:
            raise IndexError(f"lane {i} out of bounds for major dimension {self._major_dim}")

    def lane(self, i):
        """Half-open storage range of lane ``i`` as a ``slice``.

        The slice indexes ``minor_indices`` and any value array aligned with
        this pattern.
        """
        i = _as_index(i)
        self._check_major(i)
        return slice(int(self._offsets[i]), int(self._offsets[i + 1]))

    def lane_indices(self, i):
        """Minor indices stored in lane ``i`` (read-only view)."""
        return self._indices[self.lane(i)]

    def lane_lengths(self):
        """Number of entries in every lane."""
        return np.diff(self._offsets)

    def major_indices(self):
        """Lane number of every structural entry, in storage order."""
        return np.repeat(np.arange(self._major_dim, dtype=np.int64), self.lane_lengths())

    def entry_index(self, i, j):
        """Storage position of entry ``(i, j)``, or ``None`` if not structural.

        Uses binary search within the sorted lane.

        Raises
        ------
        IndexError
            If ``(i, j)`` lies outside the pattern extents.
        TypeError
            If ``i`` or ``j`` is not an integer.
        """
        i = _as_index(i)
        j = _as_index(j)
        self._check_major(i)
        if not 0 <= j < self._minor_dim:
            raise IndexError(f"minor index {j} out of bounds for minor dimension {self._minor_dim}")
        s = int(self._offsets[i])
        e = int(self._offsets[i + 1])
        pos = s + int(np.searchsorted(self._indices[s:e], j))
        if pos < e and self._indices[pos] == j:
            return pos
        return None

    def transpose_with_permutation(self):
        """Transpose the pattern by counting sort.

        Returns
        -------
        pattern : SparsityPattern
            Pattern with major and minor roles swapped.
        permutation : numpy.ndarray of int64
            ``values[permutation]`` reorders a value array aligned with this
            pattern into the order of the transposed pattern.

        Notes
        -----
        New lane offsets are the prefix sum of minor-index counts. Entries are
        then scattered into their new lane in original storage order, which is
        exactly a stable sort on the minor index. Because the original lanes
        are visited in increasing order, each new lane receives its minor
        indices (the old lane numbers) already sorted and unique, so the
        result is canonical without further checking.
        """
        counts = np.bincount(self._indices, minlength=self._minor_dim)
        offsets = np.zeros(self._minor_dim + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        permutation = np.argsort(self._indices, kind="stable").astype(np.int64, copy=False)
        indices = self.major_indices()[permutation]
        transposed = SparsityPattern(self._minor_dim, self._major_dim, offsets, indices, check=False)
        return transposed, permutation

    def transpose(self):
        """Pattern with major and minor roles swapped."""
        return self.transpose_with_permutation()[0]

    def disassemble(self):
        """Return writable copies ``(major_offsets, minor_indices)``."""
        return self._offsets.copy(), self._indices.copy()

    def __eq__(self, other):
        if not isinstance(other, SparsityPattern):
            return NotImplemented
        if self is other:
            return True
        return (
            self._major_dim == other._major_dim
            and self._minor_dim == other._minor_dim
            and np.array_equal(self._offsets, other._offsets)
            and np.array_equal(self._indices, other._indices)
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"SparsityPattern(major_dim={self._major_dim}, minor_dim={self._minor_dim}, "
            f"nnz={self.nnz})"
        )
