"""Scoped wall-clock timer for frame diagnostics."""

import logging
import time

from .logging_setup import get_logger


class Timer:
    """
    Context manager that logs how long its block took.

    Usage:
        with Timer("Main Loop"):
            ...

    The message goes out at DEBUG level, so timings only show up while
    debug output is enabled.
    """

    def __init__(self, label, logger=None):
        self.label = label
        self.logger = logger or get_logger("timing")
        self.elapsed_ms = 0.0
        self._start = None

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("- %s took: %.0fms", self.label, self.elapsed_ms)
        return False
