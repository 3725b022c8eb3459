import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def timing_metric(name: str) -> Iterator[None]:
    """
    Simple timing context manager; durations go to the log.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        logger.info("[METRIC] %s took %.3fs", name, duration)
