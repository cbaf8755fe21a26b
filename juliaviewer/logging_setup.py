"""
Logging configuration for the viewer.

Everything logs through the "juliaviewer" logger. The on-screen
"Debug output" toggle switches it between INFO and DEBUG, which turns the
per-frame timing messages from timing.Timer on and off.
"""

import logging

_LOGGER_NAME = "juliaviewer"


def get_logger(name=None):
    """Return the package logger, or a child of it when name is given."""
    if name:
        return logging.getLogger(f"{_LOGGER_NAME}.{name}")
    return logging.getLogger(_LOGGER_NAME)


def _build_formatter():
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(threadName)s %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(level=logging.INFO):
    """
    Attach a console handler to the package logger.

    Safe to call more than once; previous handlers are replaced.
    """
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter())
    logger.addHandler(handler)
    return logger


def set_debug_output(enabled):
    """Turn DEBUG-level diagnostics (frame timings) on or off."""
    get_logger().setLevel(logging.DEBUG if enabled else logging.INFO)


def debug_output_enabled():
    return get_logger().isEnabledFor(logging.DEBUG)
