"""Command line entry point: python -m juliaviewer [options]."""

import argparse
import logging

from .app import run
from .logging_setup import configure_logging, get_logger
from .settings import load_settings


def build_arg_parser():
    p = argparse.ArgumentParser(
        prog="juliaviewer",
        description="Interactive Julia set viewer. Scroll to zoom, drag to pan, "
                    "Space toggles smoothing, R resets the view, Esc quits.",
    )
    p.add_argument("--settings", type=str, default=None,
                   help="Path to a settings JSON file (default: packaged settings.json).")
    p.add_argument("--width", type=int, default=None, help="Window width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Window height in pixels.")
    p.add_argument("--max-iter", type=int, default=None, help="Initial iteration cap.")
    p.add_argument("--workers", type=int, default=None, help="Number of render worker threads.")
    p.add_argument("--log-level", type=str, default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    return p


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    configure_logging(getattr(logging, args.log_level.upper(), logging.INFO))
    logger = get_logger()

    try:
        settings = load_settings(args.settings)
        run(width=args.width, height=args.height, max_iter=args.max_iter,
            num_workers=args.workers, settings=settings)
    except ValueError as e:
        logger.error("%s", e)
        return 2
    return 0
