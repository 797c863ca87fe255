import logging
import os

logger = logging.getLogger(__name__)

_ENV_THREADS = "SPARSECORE_NUM_THREADS"

_default_threads = max(1, os.cpu_count() or 1)
_current_threads = _default_threads
_parallel_threshold = 1024


def set_num_threads(n: int) -> None:
    """Set the number of worker threads used by lane-parallel kernels.

    Non-positive values are ignored. The value is mirrored into the
    ``SPARSECORE_NUM_THREADS`` environment variable so that it survives
    into subprocesses.
    """
    global _current_threads
    if n and n > 0:
        _current_threads = int(n)
        os.environ[_ENV_THREADS] = str(_current_threads)
        logger.info("sparsecore worker threads set to %d", _current_threads)


def get_num_threads() -> int:
    # If user set env externally, honor it
    env = os.environ.get(_ENV_THREADS)
    if env:
        try:
            return max(1, int(env))
        except ValueError:
            logger.warning("ignoring invalid %s=%r", _ENV_THREADS, env)
            return _current_threads
    return _current_threads


def set_parallel_threshold(n: int) -> None:
    """Set the minimum number of major lanes before kernels fan out."""
    global _parallel_threshold
    if n < 1:
        raise ValueError("parallel threshold must be >= 1")
    _parallel_threshold = int(n)
    logger.info("sparsecore parallel threshold set to %d lanes", _parallel_threshold)


def get_parallel_threshold() -> int:
    return _parallel_threshold
