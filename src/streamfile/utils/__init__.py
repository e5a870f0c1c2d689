from collections.abc import Callable, Iterator
from contextlib import contextmanager
from time import monotonic

from loguru import logger


@contextmanager
def benchmark(
    *,
    log: Callable[[float], None] | None,
    decimal_places: int = 3,
) -> Iterator[None]:
    """Context manager for benchmarking code execution time."""

    start_time = monotonic()

    try:
        yield
    finally:
        elapsed = monotonic() - start_time

        if log:
            log(round(elapsed, decimal_places))
        else:
            logger.debug(f"Execution time: {elapsed:.{decimal_places}f} seconds")
