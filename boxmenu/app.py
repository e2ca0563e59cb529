#!/usr/bin/env python3
"""
The interactive loop: draw -> read one event -> dispatch, until quit.

`MenuApp.dispatch()` holds all key/mouse semantics and never touches the
terminal, so it can be driven directly in tests. `MenuApp.run()` wraps it in
a `TerminalSession`, which guarantees the terminal is restored on every exit
path.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, TextIO

from .actions import Action, ActionResult, invoke_action
from .config import MenuConfig
from .keys import InputDecoder, InputEvent, Key, KeyName, MouseEvent, NamedKey, WakeUp
from .model import EdgePolicy, Item, MenuModel
from .render import RenderFrame, Renderer
from .status import SessionStatus, StatusLevel
from .terminal import TerminalSession

logger = logging.getLogger(__name__)

QUIT_KEYS = frozenset({"q", "Q", "\x03"})
REFRESH_KEY = "R"

_CHAR_MOVES = {"k": -1, "j": 1}
_NAMED_MOVES = {KeyName.UP: -1, KeyName.DOWN: 1}
_NAMED_PAGES = {KeyName.PAGE_UP: -1, KeyName.PAGE_DOWN: 1}
_ACTIVATE_KEYS = {KeyName.ENTER, KeyName.RIGHT}


class RedrawPolicy(Enum):
    """When the loop repaints: only after a visible change, or every pass."""

    ON_CHANGE = "on_change"
    ALWAYS = "always"


class MenuApp:
    def __init__(
        self,
        model: MenuModel,
        renderer: Renderer,
        apply: Action,
        config: Optional[MenuConfig] = None,
        *,
        status: Optional[SessionStatus] = None,
        hotkeys: Optional[Mapping[str, Any]] = None,
        refresh: Optional[Callable[[], Iterable[Item]]] = None,
        initial_status: str = "",
        rescan_after_action: bool = False,
    ):
        self.model = model
        self.renderer = renderer
        self.apply = apply
        self.config = config or renderer.config
        if self.config.header_offset != model.header_offset:
            raise ValueError(
                f"Model header offset {model.header_offset} does not match layout ({self.config.header_offset})"
            )
        self.status = status or SessionStatus()
        if initial_status:
            self.status.set(StatusLevel.INFO, initial_status)
        self.hotkeys = dict(hotkeys or {})
        self.refresh = refresh
        self.rescan_after_action = rescan_after_action
        self.redraw = RedrawPolicy(self.config.redraw)

        self.running = True
        self.dirty = True
        self.result: Optional[ActionResult] = None
        self.last_frame: Optional[RenderFrame] = None
        self.frames_drawn = 0

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------
    def _state(self):
        return self.model.snapshot(), self.status.snapshot()

    def dispatch(self, event: InputEvent) -> bool:
        """Apply one input event. Returns False once the session should end."""
        before = self._state()
        if self.config.clear_status_on_input and isinstance(event, (Key, NamedKey, MouseEvent)):
            self.status.clear()

        if isinstance(event, Key):
            self._on_key(event.char)
        elif isinstance(event, NamedKey):
            self._on_named(event.name)
        elif isinstance(event, MouseEvent):
            self._on_mouse(event)

        if self._state() != before:
            self.dirty = True
        return self.running

    def _on_key(self, char: str) -> None:
        if char in QUIT_KEYS:
            self.running = False
        elif char in _CHAR_MOVES:
            self.model.move_relative(_CHAR_MOVES[char])
        elif char == "g":
            self.model.move_to_edge(is_end=False)
        elif char == "G":
            self.model.move_to_edge(is_end=True)
        elif char in self.hotkeys:
            self._record(invoke_action(self.apply, self.hotkeys[char]))
        elif char == REFRESH_KEY and self.refresh is not None:
            self._refresh()

    def _on_named(self, name: KeyName) -> None:
        if name in _NAMED_MOVES:
            self.model.move_relative(_NAMED_MOVES[name])
        elif name in _NAMED_PAGES:
            self.model.move_page(_NAMED_PAGES[name])
        elif name is KeyName.HOME:
            self.model.move_to_edge(is_end=False)
        elif name is KeyName.END:
            self.model.move_to_edge(is_end=True)
        elif name in _ACTIVATE_KEYS:
            self._activate()
        # LEFT, BACKSPACE and a lone ESCAPE do nothing

    def _on_mouse(self, event: MouseEvent) -> None:
        # the wheel never wraps, whatever the keyboard edge policy
        if event.is_wheel_up:
            self.model.move_relative(-1, policy=EdgePolicy.CLAMP)
        elif event.is_wheel_down:
            self.model.move_relative(1, policy=EdgePolicy.CLAMP)
        elif event.is_primary_press and self.model.select_at(event.y):
            self._activate()

    def _activate(self) -> None:
        result = self.model.activate(self.apply)
        if result is None:
            self.status.set(StatusLevel.WARN, "Nothing to select")
            return
        self._record(result)

    def _record(self, result: ActionResult) -> None:
        if result.message:
            self.status.set(result.status_level, result.message)
        elif not result.ok:
            self.status.set(StatusLevel.ERROR, "Action failed")
        if result.quit:
            self.result = result
            self.running = False
        elif result.ok and self.rescan_after_action and self.refresh is not None:
            self._rescan()

    def _rescan(self) -> Optional[int]:
        """Re-enumerate the items; returns the new count, None on failure."""
        try:
            items = list(self.refresh())
        except Exception as e:
            logger.exception("Refresh failed")
            self.status.set(StatusLevel.ERROR, f"Refresh failed: {e}")
            return None
        self.model.replace_items(items)
        return len(items)

    def _refresh(self) -> None:
        count = self._rescan()
        if count is not None:
            self.status.set(StatusLevel.INFO, f"Refreshed: {count} items")

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------
    def draw(self, out: TextIO, clear: bool = False, force: bool = True) -> bool:
        """Build a frame and write it; returns True if anything was written.

        Without `clear` or `force` the frame is only written when its lines
        differ from the last one drawn, so content that changes behind the
        model (refreshed items, header or info callbacks) is still repainted.
        """
        frame = self.renderer.build_frame(self.model, self.status)
        self.dirty = False
        if not (clear or force) and self.last_frame is not None and frame.lines == self.last_frame.lines:
            return False
        self.renderer.draw(frame, out, clear=clear)
        self.last_frame = frame
        self.frames_drawn += 1
        return True

    def loop(
        self,
        decoder: InputDecoder,
        out: TextIO,
        consume_resize: Optional[Callable[[], bool]] = None,
    ) -> Optional[ActionResult]:
        clear = True
        while self.running:
            if consume_resize is not None and consume_resize():
                clear = True
            self.draw(out, clear=clear, force=self.redraw is RedrawPolicy.ALWAYS)
            clear = False
            try:
                event = decoder.next_event()
            except WakeUp:
                logger.debug("Input wait interrupted")
                continue
            except EOFError:
                logger.info("Input closed; ending session")
                break
            self.dispatch(event)
        return self.result

    def run(self, session: Optional[TerminalSession] = None) -> Optional[ActionResult]:
        """Take over the terminal and run until quit.

        Returns the result of the action that ended the session, or None when
        the user quit without one. A session that is already active is used
        as is and left for the caller to close.
        """
        session = session or TerminalSession(self.config)
        if session.active:
            return self._run_in(session)
        with session:
            return self._run_in(session)

    def _run_in(self, session: TerminalSession) -> Optional[ActionResult]:
        decoder = InputDecoder(session.reader(), escape_timeout=self.config.escape_timeout)
        return self.loop(decoder, session.out, session.consume_resize)
