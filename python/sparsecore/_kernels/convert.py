"""Conversions between coordinate, compressed and dense layouts.

All functions work on raw parts (a :class:`~sparsecore.pattern.SparsityPattern`
plus an aligned value array, or coordinate arrays) and are orientation
agnostic: callers decide whether "major" means rows or columns.
"""

import logging

import numpy as np

from ..errors import DimensionMismatch, SparseFormatError, SparseFormatErrorKind
from ..pattern import SparsityPattern

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("sum", "error")


def coo_to_compressed(major, minor, values, major_dim, minor_dim, duplicates="sum"):
    """Sort triplets by ``(major, minor)`` and merge equal coordinates.

    Parameters
    ----------
    major, minor : array-like of int
        Coordinates of each triplet, in any order, repeats allowed.
    values : array-like of float
        Triplet values.
    major_dim, minor_dim : int
        Output extents.
    duplicates : {"sum", "error"}
        ``"sum"`` adds the values of repeated coordinates. ``"error"`` rejects
        them with ``SparseFormatError(DUPLICATE_ENTRY)``.

    Returns
    -------
    tuple[SparsityPattern, numpy.ndarray]
        Canonical pattern and the merged values aligned with it.
    """
    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError(f"duplicates must be one of {DUPLICATE_POLICIES}, got {duplicates!r}")
    major = np.asarray(major, dtype=np.int64).reshape(-1)
    minor = np.asarray(minor, dtype=np.int64).reshape(-1)
    values = np.asarray(values, dtype=np.float64).reshape(-1)
    n = values.shape[0]
    if major.shape[0] != n or minor.shape[0] != n:
        raise DimensionMismatch(n, (major.shape[0], minor.shape[0]),
                                "coordinate and value arrays must have equal length")
    bad = np.flatnonzero((major < 0) | (major >= major_dim) | (minor < 0) | (minor >= minor_dim))
    if bad.size:
        k = int(bad[0])
        raise SparseFormatError(
            SparseFormatErrorKind.INDEX_OUT_OF_BOUNDS,
            f"triplet ({int(major[k])}, {int(minor[k])}) is outside ({major_dim}, {minor_dim})",
            lane=int(major[k]),
            index=int(minor[k]),
        )

    # lexsort is stable: equal coordinates keep their insertion order, so
    # duplicates are summed in the order they were pushed.
    order = np.lexsort((minor, major))
    major = major[order]
    minor = minor[order]
    values = values[order]
    if n:
        run_start = np.empty(n, dtype=bool)
        run_start[0] = True
        run_start[1:] = (major[1:] != major[:-1]) | (minor[1:] != minor[:-1])
        starts = np.flatnonzero(run_start)
        if starts.shape[0] != n:
            if duplicates == "error":
                k = int(np.flatnonzero(~run_start)[0])
                raise SparseFormatError(
                    SparseFormatErrorKind.DUPLICATE_ENTRY,
                    f"coordinate ({int(major[k])}, {int(minor[k])}) occurs more than once",
                    lane=int(major[k]),
                    index=int(minor[k]),
                )
            values = np.add.reduceat(values, starts)
            major = major[starts]
            minor = minor[starts]
            logger.debug("merged %d triplets into %d entries", n, starts.shape[0])

    counts = np.bincount(major, minlength=major_dim)
    offsets = np.zeros(major_dim + 1, dtype=np.int64)
    np.cumsum(counts, out=offsets[1:])
    pattern = SparsityPattern(major_dim, minor_dim, offsets, minor, check=False)
    return pattern, values


def compressed_to_coo(pattern, values):
    """Expand every structural entry into a ``(major, minor, value)`` triplet."""
    return pattern.major_indices(), pattern.minor_indices.copy(), np.array(values, dtype=np.float64)


def transpose_compressed(pattern, values):
    """Swap major and minor roles of a compressed matrix.

    Returns the transposed pattern and ``values`` permuted into its order.
    Applied to a CSR matrix the result is the CSC representation of the same
    matrix, or equivalently the CSR representation of its transpose.
    """
    transposed, permutation = pattern.transpose_with_permutation()
    return transposed, np.asarray(values)[permutation]


def compressed_to_dense(pattern, values, row_major=True):
    """Materialize a compressed matrix as a dense ``numpy.ndarray``.

    ``row_major`` tells whether the pattern's major lanes are rows (CSR) or
    columns (CSC).
    """
    out = np.zeros((pattern.major_dim, pattern.minor_dim), dtype=np.float64)
    # Canonical patterns hold each coordinate once, so plain assignment is exact.
    out[pattern.major_indices(), pattern.minor_indices] = values
    if row_major:
        return out
    return np.ascontiguousarray(out.T)


def dense_to_compressed(dense, zero_threshold=0.0, row_major=True):
    """Build a canonical compressed structure from a dense 2-D array.

    Parameters
    ----------
    dense : array-like, shape (nrows, ncols)
        Source matrix.
    zero_threshold : float or None, optional (default: 0.0)
        Entries with ``abs(value) <= zero_threshold`` are left out of the
        structure. ``None`` keeps every entry, explicit zeros included.
    row_major : bool, optional
        Produce row lanes (CSR) when true, column lanes (CSC) otherwise.

    Returns
    -------
    tuple[SparsityPattern, numpy.ndarray]
    """
    dense = np.asarray(dense, dtype=np.float64)
    if dense.ndim != 2:
        raise ValueError("dense input must be 2D")
    lanes = dense if row_major else dense.T
    if zero_threshold is None:
        mask = np.ones(lanes.shape, dtype=bool)
    else:
        if zero_threshold < 0:
            raise ValueError("zero_threshold must be non-negative or None")
        # NaN compares false, so it is kept rather than silently dropped.
        mask = ~(np.abs(lanes) <= zero_threshold)
    # nonzero scans in C order of the logical lane view: lanes ascending,
    # minor indices ascending within each lane.
    major, minor = np.nonzero(mask)
    values = lanes[major, minor]
    offsets = np.zeros(lanes.shape[0] + 1, dtype=np.int64)
    np.cumsum(np.count_nonzero(mask, axis=1), out=offsets[1:])
    pattern = SparsityPattern(lanes.shape[0], lanes.shape[1], offsets, minor.astype(np.int64), check=False)
    return pattern, np.ascontiguousarray(values, dtype=np.float64)
