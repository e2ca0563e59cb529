"""
The boundary between the menu engine and the code that does the work.

Item sources hand the engine `Item`s carrying an opaque payload; activating
an item calls `apply(payload) -> ActionResult`. The engine only reads the
result's flag, message and quit request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .console import log_error, log_success
from .status import StatusLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str = ""
    level: Optional[StatusLevel] = None
    quit: bool = False
    output: Optional[str] = None  # emitted on stdout once the session is over

    @property
    def status_level(self) -> StatusLevel:
        if self.level is not None:
            return self.level
        return StatusLevel.OK if self.ok else StatusLevel.ERROR

    @classmethod
    def success(cls, message: str = "", **kw: Any) -> "ActionResult":
        return cls(True, message, **kw)

    @classmethod
    def failure(cls, message: str, **kw: Any) -> "ActionResult":
        return cls(False, message, **kw)

    @classmethod
    def info(cls, message: str) -> "ActionResult":
        return cls(True, message, level=StatusLevel.INFO)

    @classmethod
    def warning(cls, message: str) -> "ActionResult":
        return cls(True, message, level=StatusLevel.WARN)

    @classmethod
    def quit_session(cls, message: str = "", output: Optional[str] = None) -> "ActionResult":
        return cls(True, message, quit=True, output=output)


Action = Callable[[Any], Optional[ActionResult]]


def invoke_action(apply: Action, payload: Any) -> ActionResult:
    """Call `apply(payload)`; exceptions become a failed result."""
    try:
        result = apply(payload)
    except Exception as e:
        logger.exception("Action failed for payload %r", payload)
        return ActionResult.failure(f"{type(e).__name__}: {e}")
    if result is None:
        return ActionResult.success()
    return result


def run_direct(apply: Action, payload: Any) -> int:
    """Non-interactive counterpart of activating one item.

    Prints the result (output on stdout, failures on stderr) and returns the
    process exit status: 0 on success, 1 on failure.
    """
    result = invoke_action(apply, payload)
    if not result.ok:
        log_error(result.message or "Action failed")
        return 1
    if result.output is not None:
        print(result.output)
    elif result.message:
        log_success(result.message)
    return 0
