"""Logging setup shared by the CLI and the HTTP service."""

from __future__ import annotations

import logging
import sys
from typing import Optional


def configure_logging(log_level: int | str, log_file: Optional[str] = None) -> logging.Logger:
    """Configure root logging handlers for an entry point.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g. ``"INFO"``).
    log_file : str, optional
        Path of a file that receives a copy of the log output.

    Returns
    -------
    logging.Logger
        The configured root logger.

    """
    if isinstance(log_level, int):
        resolved_level = log_level
    else:
        resolved_level = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter("%(levelname)s: [%(name)s] %(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

    return root_logger
