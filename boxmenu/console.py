"""
Console output for everything that happens outside the interactive session.

Built on Rich: themed info/warning/error/success helpers for the command
line, plus `setup_file_logging` for diagnostics. While a session owns the
terminal nothing may print, so engine modules only use `logging`, which the
CLI points at a file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

_THEME = Theme(
    {
        "ui.info": "cyan",
        "ui.success": "green bold",
        "ui.warn": "yellow bold",
        "ui.error": "red bold",
        "ui.dim": "dim",
    }
)

console = Console(theme=_THEME, highlight=False)
err_console = Console(theme=_THEME, highlight=False, stderr=True)

VERBOSE = False

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def set_verbose(verbose: bool) -> None:
    """Set global verbosity. If False, log_info is suppressed."""
    global VERBOSE
    VERBOSE = bool(verbose)


def log_info(message: str) -> None:
    if VERBOSE:
        console.print(f"[ui.info][INFO][/] {escape(message)}")


def log_warning(message: str) -> None:
    err_console.print(f"[ui.warn][WARN][/] {escape(message)}")


def log_error(message: str) -> None:
    err_console.print(f"[ui.error][ERROR][/] {escape(message)}")


def log_success(message: str) -> None:
    console.print(f"[ui.success][SUCCESS][/] {escape(message)}")


def setup_file_logging(log_file: Optional[str | Path], debug: bool = False) -> logging.Logger:
    """Send the `boxmenu` logger to `log_file` (no-op handler setup when None)."""
    logger = logging.getLogger("boxmenu")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        fh = logging.FileHandler(Path(log_file).expanduser(), mode="a", encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(fh)
    return logger
