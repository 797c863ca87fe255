import argparse
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import scipy.sparse as sp

# Ensure we can import sparsecore from source tree
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sparsecore import set_num_threads  # noqa: E402
from sparsecore.sparse import CSR  # noqa: E402

# ---------- Builders ----------


def build_scipy_csr(m: int, n: int, density: float, seed: int) -> Tuple[sp.csr_matrix, int]:
    rs = np.random.RandomState(seed)
    A_coo = sp.random(m, n, density=density, format="coo", random_state=rs, data_rvs=rs.standard_normal)
    A_csr = A_coo.tocsr()
    A_csr.sort_indices()
    return A_csr, int(A_csr.nnz)


def build_sparsecore_from_scipy(A_scipy: sp.csr_matrix) -> CSR:
    csr = A_scipy.tocsr()
    return CSR(csr.indptr, csr.indices, csr.data.astype(np.float64, copy=False), csr.shape, check=False)


# ---------- Timing helpers ----------


def time_op(fn: Callable[[], Any], warmup: int, repeat: int) -> List[float]:
    for _ in range(warmup):
        fn()
    times: List[float] = []
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        times.append(t1 - t0)
    return times


def summarize(name: str, times: List[float]) -> Optional[Dict[str, Any]]:
    if not times:
        return None
    arr = np.array(times, dtype=np.float64)
    return {
        "name": name,
        "min_ms": float(arr.min() * 1e3),
        "median_ms": float(np.median(arr) * 1e3),
        "mean_ms": float(arr.mean() * 1e3),
    }


def to_dense(x: Any) -> np.ndarray:
    if isinstance(x, np.ndarray):
        return x
    return x.toarray()


# ---------- Main ----------


def main():
    p = argparse.ArgumentParser(description="sparsecore vs scipy.sparse CSR kernels")
    p.add_argument("--m", type=int, default=4096)
    p.add_argument("--n", type=int, default=4096)
    p.add_argument("--k", type=int, default=64, help="Columns of the dense SpMM operand")
    p.add_argument("--density", type=float, default=0.001)
    p.add_argument("--warmup", type=int, default=2)
    p.add_argument("--repeat", type=int, default=5)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--threads", type=int, default=0, help="Worker threads (0 keeps the default)")
    p.add_argument("--validate", action="store_true")
    p.add_argument(
        "--ops",
        type=str,
        default="all",
        help="Comma-separated ops: spmv, spmm, spgemm, transpose, add, sub, scale, to_csc",
    )
    p.add_argument("--alpha", type=float, default=2.0, help="Scalar for scale")
    args = p.parse_args()

    if args.threads > 0:
        set_num_threads(args.threads)

    A_scipy, nnz = build_scipy_csr(args.m, args.n, args.density, args.seed)
    B_scipy, _ = build_scipy_csr(args.m, args.n, args.density, args.seed + 7)
    C_scipy, _ = build_scipy_csr(args.n, args.m, args.density, args.seed + 13)
    A = build_sparsecore_from_scipy(A_scipy)
    B = build_sparsecore_from_scipy(B_scipy)
    C = build_sparsecore_from_scipy(C_scipy)

    rs = np.random.RandomState(args.seed + 1)
    x = rs.standard_normal(args.n)
    X = rs.standard_normal((args.n, args.k))

    cases = {
        "spmv": (lambda: A_scipy @ x, lambda: A @ x),
        "spmm": (lambda: A_scipy @ X, lambda: A @ X),
        "spgemm": (lambda: A_scipy @ C_scipy, lambda: A @ C),
        "transpose": (lambda: A_scipy.transpose().tocsr(), lambda: A.T),
        "add": (lambda: A_scipy + B_scipy, lambda: A + B),
        "sub": (lambda: A_scipy - B_scipy, lambda: A - B),
        "scale": (lambda: args.alpha * A_scipy, lambda: args.alpha * A),
        "to_csc": (lambda: A_scipy.tocsc(), lambda: A.to_csc()),
    }
    wanted = {op.strip().lower() for op in args.ops.split(",") if op.strip()}
    if "all" in wanted or not wanted:
        wanted = set(cases)
    unknown = wanted - set(cases)
    if unknown:
        p.error(f"unknown ops: {sorted(unknown)}")

    print(f"A: {args.m}x{args.n}, density={args.density}, nnz={nnz}")
    results: List[Dict[str, Any]] = []
    for op in cases:
        if op not in wanted:
            continue
        ref_fn, fn = cases[op]
        if args.validate:
            ok = np.allclose(to_dense(ref_fn()), to_dense(fn()), rtol=1e-10, atol=1e-10)
            print(f"validate {op}: {'ok' if ok else 'MISMATCH'}")
        for backend, f in (("scipy", ref_fn), ("sparsecore", fn)):
            r = summarize(f"{op}[{backend}]", time_op(f, args.warmup, args.repeat))
            if r is not None:
                results.append(r)

    for r in results:
        print(f"{r['name']:<24} min={r['min_ms']:.3f}ms median={r['median_ms']:.3f}ms mean={r['mean_ms']:.3f}ms")


if __name__ == "__main__":
    main()
