"""Arithmetic kernels on compressed parts.

The kernels take patterns and value arrays, never matrix objects, and treat
"major" and "minor" abstractly so that CSR and CSC share one implementation.
Every kernel checks operand extents before allocating any output.
"""

import logging

import numpy as np

from ..errors import DimensionMismatch
from ._lanes import LaneBlock, assemble, concat_or_empty, map_lane_blocks

logger = logging.getLogger(__name__)


def scale(values, alpha):
    """Multiply ``values`` by ``alpha`` in place and return it."""
    values *= alpha
    return values


def _merge_lane(ia, xa, ib, xb):
    # Both inputs are strictly increasing, so the stable sort of their
    # concatenation is a single merge step and every minor index occurs at
    # most twice afterwards.
    if ib.shape[0] == 0:
        return ia, xa
    if ia.shape[0] == 0:
        return ib, xb
    idx = np.concatenate((ia, ib))
    val = np.concatenate((xa, xb))
    order = np.argsort(idx, kind="stable")
    idx = idx[order]
    val = val[order]
    first = np.empty(idx.shape[0], dtype=bool)
    first[0] = True
    first[1:] = idx[1:] != idx[:-1]
    starts = np.flatnonzero(first)
    return idx[starts], np.add.reduceat(val, starts)


def add_compressed(pa, va, pb, vb, alpha=1.0, beta=1.0):
    """Compute ``alpha * A + beta * B`` for operands of equal orientation.

    The result holds the union of both patterns; positions present in both
    operands get the summed value, even if that sum is zero.

    Raises
    ------
    DimensionMismatch
        If the two patterns have different extents.
    """
    if (pa.major_dim, pa.minor_dim) != (pb.major_dim, pb.minor_dim):
        raise DimensionMismatch((pa.major_dim, pa.minor_dim), (pb.major_dim, pb.minor_dim))
    ao, ai = pa.major_offsets, pa.minor_indices
    bo, bi = pb.major_offsets, pb.minor_indices
    va = np.asarray(va, dtype=np.float64)
    vb = np.asarray(vb, dtype=np.float64)
    logger.debug("sparse add: %d lanes, nnz %d + %d", pa.major_dim, pa.nnz, pb.nnz)

    def block(start, stop):
        counts = np.zeros(stop - start, dtype=np.int64)
        idx_parts = []
        val_parts = []
        for i in range(start, stop):
            sa, ea = int(ao[i]), int(ao[i + 1])
            sb, eb = int(bo[i]), int(bo[i + 1])
            if sa == ea and sb == eb:
                continue
            idx, val = _merge_lane(ai[sa:ea], alpha * va[sa:ea], bi[sb:eb], beta * vb[sb:eb])
            counts[i - start] = idx.shape[0]
            idx_parts.append(idx)
            val_parts.append(val)
        return LaneBlock(
            start, counts, concat_or_empty(idx_parts, np.int64), concat_or_empty(val_parts, np.float64)
        )

    blocks = map_lane_blocks(block, pa.major_dim)
    return assemble(pa.major_dim, pa.minor_dim, blocks)


def spmm_dense(pattern, values, dense, row_major=True):
    """Sparse times dense product.

    Parameters
    ----------
    pattern, values
        The sparse left operand.
    dense : numpy.ndarray, shape (ncols, k)
        Dense right operand (2-D).
    row_major : bool
        Whether the pattern lanes are rows (CSR) or columns (CSC).

    Returns
    -------
    numpy.ndarray, shape (nrows, k)
    """
    ncols = pattern.minor_dim if row_major else pattern.major_dim
    nrows = pattern.major_dim if row_major else pattern.minor_dim
    if dense.shape[0] != ncols:
        raise DimensionMismatch(ncols, dense.shape[0])
    offsets, indices = pattern.major_offsets, pattern.minor_indices
    out = np.zeros((nrows, dense.shape[1]), dtype=np.float64)
    logger.debug("spmm: (%d, %d) x (%d, %d), nnz %d", nrows, ncols, dense.shape[0], dense.shape[1], pattern.nnz)

    if row_major:
        # Output row i depends on sparse row i only; blocks write disjoint rows.
        def block(start, stop):
            for i in range(start, stop):
                s, e = int(offsets[i]), int(offsets[i + 1])
                if s < e:
                    out[i] = values[s:e] @ dense[indices[s:e]]

        map_lane_blocks(block, pattern.major_dim)
        return out

    # Column lanes scatter into shared output rows, so they run in sequence.
    for j in range(pattern.major_dim):
        s, e = int(offsets[j]), int(offsets[j + 1])
        if s < e:
            out[indices[s:e]] += np.outer(values[s:e], dense[j])
    return out


def spgemm(px, vx, py, vy):
    """Sparse times sparse product by lane expansion.

    Output lane ``i`` is ``sum(a * Y[k] for (k, a) in X[i])``: for a CSR product
    ``A @ B`` pass ``X = A`` and ``Y = B``; for a CSC product pass ``X = B`` and
    ``Y = A``. The work is proportional to the number of multiply-adds actually
    performed, not to the dense extents.

    Entries produced by numeric cancellation are kept as explicit zeros.

    Raises
    ------
    DimensionMismatch
        If ``X``'s minor extent differs from ``Y``'s major extent.
    """
    if px.minor_dim != py.major_dim:
        raise DimensionMismatch(px.minor_dim, py.major_dim)
    xo, xi = px.major_offsets, px.minor_indices
    yo, yi = py.major_offsets, py.minor_indices
    vx = np.asarray(vx, dtype=np.float64)
    vy = np.asarray(vy, dtype=np.float64)
    y_offsets = yo.tolist()
    logger.debug("spgemm: %d lanes, nnz %d x %d", px.major_dim, px.nnz, py.nnz)

    def block(start, stop):
        # Dense accumulator reused by every lane of the block; only touched
        # positions are read back and reset.
        acc = np.zeros(py.minor_dim, dtype=np.float64)
        counts = np.zeros(stop - start, dtype=np.int64)
        idx_parts = []
        val_parts = []
        for i in range(start, stop):
            s, e = int(xo[i]), int(xo[i + 1])
            touched = []
            for k, a in zip(xi[s:e].tolist(), vx[s:e].tolist()):
                ks, ke = y_offsets[k], y_offsets[k + 1]
                if ks == ke:
                    continue
                cols = yi[ks:ke]
                acc[cols] += a * vy[ks:ke]
                touched.append(cols)
            if not touched:
                continue
            cols = np.unique(np.concatenate(touched)) if len(touched) > 1 else np.array(touched[0])
            idx_parts.append(cols)
            val_parts.append(acc[cols])
            acc[cols] = 0.0
            counts[i - start] = cols.shape[0]
        return LaneBlock(
            start, counts, concat_or_empty(idx_parts, np.int64), concat_or_empty(val_parts, np.float64)
        )

    blocks = map_lane_blocks(block, px.major_dim)
    return assemble(px.major_dim, py.minor_dim, blocks)
