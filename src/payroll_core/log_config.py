"""Logging setup for the payroll core."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the package logger.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger("payroll_core")
    root.setLevel(level)

    if not any(getattr(h, "_payroll_core", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._payroll_core = True  # type: ignore[attr-defined]
        root.addHandler(handler)
