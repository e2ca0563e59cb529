#!/usr/bin/env python3
"""
boxmenu: keyboard- and mouse-driven list menus drawn in a box on the terminal.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .actions import ActionResult, run_direct  # noqa: E402,F401
from .app import MenuApp, RedrawPolicy  # noqa: E402,F401
from .config import MenuConfig, load_config  # noqa: E402,F401
from .errors import BoxMenuError, PreconditionError, TerminalError  # noqa: E402,F401
from .model import EdgePolicy, Item, MenuModel  # noqa: E402,F401
from .render import RenderFrame, Renderer  # noqa: E402,F401
from .status import SessionStatus, StatusLevel  # noqa: E402,F401
from .terminal import TerminalSession  # noqa: E402,F401

__all__ = [
    "ActionResult",
    "run_direct",
    "MenuApp",
    "RedrawPolicy",
    "MenuConfig",
    "load_config",
    "BoxMenuError",
    "PreconditionError",
    "TerminalError",
    "EdgePolicy",
    "Item",
    "MenuModel",
    "RenderFrame",
    "Renderer",
    "SessionStatus",
    "StatusLevel",
    "TerminalSession",
]
