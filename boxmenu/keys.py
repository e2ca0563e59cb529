#!/usr/bin/env python3
"""
Keyboard and mouse input decoding.

The terminal delivers characters; `InputDecoder.next_event()` turns them into
one of four event types:

    Key(char)            plain character (printable or control)
    NamedKey(KeyName.X)  arrows, paging, home/end, enter, escape, backspace
    MouseEvent(...)      SGR extended mouse report (ESC [ < b ; x ; y M|m)
    Unrecognized(raw)    anything else; never changes menu state

Escape sequences are framed by `EscapeParser`, a small state machine over the
control-sequence grammar, so a truncated or garbled report is rejected as a
whole instead of leaking fragments into the key handler.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional, Protocol, Union

from .ansi import ESC

logger = logging.getLogger(__name__)


class KeyName(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"


@dataclass(frozen=True)
class Key:
    char: str


@dataclass(frozen=True)
class NamedKey:
    name: KeyName


@dataclass(frozen=True)
class MouseEvent:
    """Decoded SGR mouse report. `x`/`y` are 1-based column/row."""

    button: int
    x: int
    y: int
    is_press: bool

    BUTTON_PRIMARY = 0
    WHEEL_UP = 64
    WHEEL_DOWN = 65

    @property
    def is_primary_press(self) -> bool:
        return self.button == self.BUTTON_PRIMARY and self.is_press

    @property
    def is_wheel_up(self) -> bool:
        return self.button == self.WHEEL_UP

    @property
    def is_wheel_down(self) -> bool:
        return self.button == self.WHEEL_DOWN


@dataclass(frozen=True)
class Unrecognized:
    raw: str = ""


InputEvent = Union[Key, NamedKey, MouseEvent, Unrecognized]

_LETTER_KEYS = {
    "A": KeyName.UP,
    "B": KeyName.DOWN,
    "C": KeyName.RIGHT,
    "D": KeyName.LEFT,
    "H": KeyName.HOME,
    "F": KeyName.END,
}

_TILDE_KEYS = {
    "1": KeyName.HOME,
    "4": KeyName.END,
    "5": KeyName.PAGE_UP,
    "6": KeyName.PAGE_DOWN,
}

_PLAIN_KEYS = {
    "\r": KeyName.ENTER,
    "\n": KeyName.ENTER,
    "\x7f": KeyName.BACKSPACE,
    "\x08": KeyName.BACKSPACE,
}


# ---------------------------------------------------------------------------
# Sequence grammar

class _State(Enum):
    INTRO = "intro"
    CSI = "csi"
    SS3 = "ss3"
    DONE = "done"
    INVALID = "invalid"


class EscapeParser:
    """Incremental parser for the characters that follow an ESC.

    `feed()` returns True once the sequence is complete (or known to be bad).
    CSI bodies end at the first final byte (0x40-0x7E); SS3 ('O') bodies are
    exactly one character. Anything else after ESC is invalid.
    """

    MAX_LENGTH = 32

    def __init__(self) -> None:
        self.state = _State.INTRO
        self.body: list[str] = []

    @property
    def finished(self) -> bool:
        return self.state in (_State.DONE, _State.INVALID)

    def feed(self, ch: str) -> bool:
        if self.finished:
            return True
        self.body.append(ch)
        if self.state is _State.INTRO:
            if ch == "[":
                self.state = _State.CSI
            elif ch == "O":
                self.state = _State.SS3
            else:
                self.state = _State.INVALID
        elif self.state is _State.SS3:
            self.state = _State.DONE
        elif self.state is _State.CSI:
            if "\x20" <= ch <= "\x3f":
                if len(self.body) > self.MAX_LENGTH:
                    self.state = _State.INVALID
            elif "\x40" <= ch <= "\x7e":
                self.state = _State.DONE
            else:
                self.state = _State.INVALID
        return self.finished

    def result(self) -> InputEvent:
        body = "".join(self.body)
        if self.state is not _State.DONE:
            return Unrecognized(ESC + body)
        if body[0] == "O":
            name = _LETTER_KEYS.get(body[1])
            return NamedKey(name) if name else Unrecognized(ESC + body)
        # CSI
        if body.startswith("[<"):
            return decode_mouse(body[2:])
        params, final = body[1:-1], body[-1]
        if final == "~":
            name = _TILDE_KEYS.get(params)
            return NamedKey(name) if name else Unrecognized(ESC + body)
        name = _LETTER_KEYS.get(final)
        if name and all(c.isdigit() or c == ";" for c in params):
            return NamedKey(name)
        return Unrecognized(ESC + body)


def _is_number(field: str) -> bool:
    return bool(field) and field.isascii() and field.isdigit()


def decode_mouse(body: str) -> InputEvent:
    """Decode the part of an SGR mouse report after 'ESC [ <'.

    `"0;5;7M"` -> MouseEvent(button=0, x=5, y=7, is_press=True).
    Non-numeric fields, a wrong field count or a missing M/m terminator
    yield `Unrecognized`.
    """
    if not body or body[-1] not in "Mm":
        return Unrecognized(f"{ESC}[<{body}")
    fields = body[:-1].split(";")
    if len(fields) != 3 or not all(_is_number(f) for f in fields):
        return Unrecognized(f"{ESC}[<{body}")
    button, x, y = (int(f) for f in fields)
    return MouseEvent(button=button, x=x, y=y, is_press=body[-1] == "M")


def decode_escape(body: str) -> InputEvent:
    """Decode a complete escape sequence given without its leading ESC."""
    if not body:
        return NamedKey(KeyName.ESCAPE)
    parser = EscapeParser()
    for i, ch in enumerate(body):
        if parser.feed(ch):
            if i != len(body) - 1:
                return Unrecognized(ESC + body)
            return parser.result()
    return Unrecognized(ESC + body)


def decode_char(ch: str) -> InputEvent:
    name = _PLAIN_KEYS.get(ch)
    if name:
        return NamedKey(name)
    return Key(ch)


# ---------------------------------------------------------------------------
# Reading

class CharReader(Protocol):
    def read(self, timeout: Optional[float]) -> Optional[str]:
        """Return one character, or None if `timeout` elapsed first.

        `timeout=None` blocks. Raises EOFError when the input is closed, and
        may raise WakeUp from a blocking read.
        """


class WakeUp(Exception):
    """A blocking read was interrupted through the wake-up descriptor."""


class TtyReader:
    """Character reader over a raw terminal file descriptor.

    `wake_fd` is the read end of a self-pipe. A byte written to it (from a
    signal handler) ends a blocking `read(None)` with `WakeUp`, so the caller
    can react without waiting for the next keypress. Bounded reads ignore it,
    so an escape sequence is never cut short by a wake-up.
    """

    def __init__(self, fd: int, encoding: str = "utf-8", wake_fd: Optional[int] = None):
        self.fd = fd
        self.wake_fd = wake_fd
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending: Deque[str] = deque()

    def read(self, timeout: Optional[float]) -> Optional[str]:
        while not self._pending:
            if timeout is not None:
                ready, _, _ = select.select([self.fd], [], [], timeout)
                if not ready:
                    return None
            elif self.wake_fd is not None:
                ready, _, _ = select.select([self.fd, self.wake_fd], [], [])
                if self.wake_fd in ready:
                    os.read(self.wake_fd, 512)
                    if self.fd not in ready:
                        raise WakeUp()
            data = os.read(self.fd, 1024)
            if not data:
                raise EOFError("terminal input closed")
            self._pending.extend(self._decoder.decode(data))
        return self._pending.popleft()


class InputDecoder:
    """Turns a character stream into discrete input events.

    The only unbounded wait is the first `read(None)`; continuation
    characters of an escape sequence are awaited for at most
    `escape_timeout` seconds each.
    """

    def __init__(self, reader: CharReader, escape_timeout: float = 0.05):
        self.reader = reader
        self.escape_timeout = escape_timeout

    def next_event(self) -> InputEvent:
        ch = self.reader.read(None)
        if ch != ESC:
            return decode_char(ch)

        parser = EscapeParser()
        while not parser.finished:
            nxt = self.reader.read(self.escape_timeout)
            if nxt is None:
                break
            parser.feed(nxt)

        if not parser.body:
            return NamedKey(KeyName.ESCAPE)

        event = parser.result()
        if isinstance(event, Unrecognized):
            if parser.finished:
                self._drain()
            logger.debug("Discarded input sequence %r", event.raw)
        return event

    def _drain(self) -> None:
        """Drop the immediately available tail of a garbled sequence."""
        while self.reader.read(0) is not None:
            pass
