"""
Timing for Last Man Standing service calls

Functions decorated with @timer log how long they took and warn when a call
runs past SLOW_FUNCTION_THRESHOLD. A SettlementError is a normal rejection
(bad id, unknown round, wrong caller) and is re-raised without an error line.
"""

import functools
import time

from flask import current_app

from lastman.services.errors import SettlementError
from lastman.utils.logging_config import get_logger

logger = get_logger(__name__)


def _elapsed(start):
    return time.perf_counter() - start


def timer(func):
    """Log the duration of a service call"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except SettlementError as e:
            logger.debug(
                f"{func.__name__} rejected after {_elapsed(start):.3f}s: {e.return_code}"
            )
            raise
        except Exception as e:
            logger.error(f"{func.__name__} failed after {_elapsed(start):.3f}s: {e}")
            raise

        elapsed = _elapsed(start)
        threshold = current_app.config.get("SLOW_FUNCTION_THRESHOLD", 1.0)
        if elapsed > threshold:
            logger.warning(
                f"Slow call {func.__name__} took {elapsed:.2f}s (threshold: {threshold}s)"
            )
        else:
            logger.debug(f"{func.__name__} completed in {elapsed:.3f}s")

        return result

    return wrapper
