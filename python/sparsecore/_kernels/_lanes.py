"""Lane-parallel execution helpers.

Every compressed kernel iterates over independent major lanes. The helpers
here split the lane range into contiguous blocks, run a block function on a
thread pool when the matrix is large enough, and assemble the per-block
results into one canonical pattern. Output offsets are fixed by a prefix sum
of the per-lane counts before any block writes, so each block copies into a
disjoint slice of the pre-allocated output arrays.
"""

import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .._runtime import get_num_threads, get_parallel_threshold
from ..pattern import SparsityPattern

logger = logging.getLogger(__name__)

# Result of one block: ``counts[k]`` entries of lane ``start + k`` stored
# back to back in ``indices``/``values``.
LaneBlock = namedtuple("LaneBlock", ["start", "counts", "indices", "values"])


def lane_blocks(n_lanes, n_workers):
    """Split ``[0, n_lanes)`` into at most ``n_workers`` contiguous blocks."""
    if n_lanes <= 0:
        return [(0, 0)]
    n_workers = max(1, min(int(n_workers), n_lanes))
    bounds = np.linspace(0, n_lanes, n_workers + 1).astype(np.int64)
    return [(int(bounds[k]), int(bounds[k + 1])) for k in range(n_workers)]


def _run(fn, tasks):
    workers = min(get_num_threads(), len(tasks))
    if workers <= 1:
        return [fn(*t) for t in tasks]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(fn, *t) for t in tasks]
        return [f.result() for f in futures]


def map_lane_blocks(fn, n_lanes):
    """Call ``fn(start, stop)`` for each lane block and return results in order.

    Runs inline unless more than one worker thread is configured and
    ``n_lanes`` reaches the parallel threshold.
    """
    threads = get_num_threads()
    if threads <= 1 or n_lanes < get_parallel_threshold():
        return [fn(0, n_lanes)]
    blocks = lane_blocks(n_lanes, threads)
    logger.debug("fanning %d lanes out over %d blocks", n_lanes, len(blocks))
    return _run(fn, blocks)


def assemble(major_dim, minor_dim, blocks):
    """Stitch per-block lane contents into a pattern and value array.

    Parameters
    ----------
    major_dim, minor_dim : int
        Extents of the output pattern.
    blocks : list of LaneBlock
        Block results covering ``[0, major_dim)`` in lane order. Lane contents
        must already be sorted and duplicate free.

    Returns
    -------
    tuple[SparsityPattern, numpy.ndarray]
    """
    counts = np.zeros(major_dim, dtype=np.int64)
    for b in blocks:
        counts[b.start : b.start + b.counts.shape[0]] = b.counts
    offsets = np.zeros(major_dim + 1, dtype=np.int64)
    np.cumsum(counts, out=offsets[1:])
    nnz = int(offsets[-1])
    indices = np.empty(nnz, dtype=np.int64)
    values = np.empty(nnz, dtype=np.float64)

    def copy(b):
        s = int(offsets[b.start])
        e = s + b.indices.shape[0]
        indices[s:e] = b.indices
        values[s:e] = b.values

    _run(copy, [(b,) for b in blocks])
    pattern = SparsityPattern(major_dim, minor_dim, offsets, indices, check=False)
    return pattern, values


def concat_or_empty(parts, dtype):
    if not parts:
        return np.empty(0, dtype=dtype)
    if len(parts) == 1:
        return np.asarray(parts[0], dtype=dtype)
    return np.concatenate(parts).astype(dtype, copy=False)
