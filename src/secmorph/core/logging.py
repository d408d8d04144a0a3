"""Structured logging setup for the secmorph pipeline."""

from __future__ import annotations

import logging
import sys

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("trimesh", "shapely")


def setup_logging(level: str = "INFO") -> None:
    """Configure one stdout handler with the pipeline's line format."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
