"""
Exception hierarchy for boxmenu.

Decode problems never raise (they become `Unrecognized` events) and action
failures are reported through the status line, so only the conditions that
stop a session before or while it owns the terminal are modelled here.
"""

from __future__ import annotations


class BoxMenuError(Exception):
    """Base class for all boxmenu errors."""


class PreconditionError(BoxMenuError):
    """A dependency, item source or configuration value is unusable."""


class TerminalError(BoxMenuError):
    """Raw mode / alternate screen could not be acquired."""
