"""Timing of pipeline stages for reporting alongside results.
"""
import contextlib
import time

from readqc.log import logger

@contextlib.contextmanager
def report(label):
    """Log stage start and elapsed wall clock time."""
    logger.info("Timing: %s" % label)
    start = time.monotonic()
    try:
        yield None
    finally:
        logger.debug("Timing: %s finished in %.1fs" % (label, time.monotonic() - start))
