"""Logging setup for the gitnav CLI."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

DEBUG_ENV = "GITNAV_DEBUG"
_HANDLER_NAME = "gitnav-rich"


def debug_requested(flag: bool = False) -> bool:
    if flag:
        return True
    return os.environ.get(DEBUG_ENV, "").strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(debug: bool = False) -> None:
    """Route the ``gitnav`` loggers to stderr through rich."""

    package_logger = logging.getLogger("gitnav")
    level = logging.DEBUG if debug_requested(debug) else logging.WARNING
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=debug_requested(debug),
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    package_logger.addHandler(handler)
