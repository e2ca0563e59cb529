#!/usr/bin/env python3
"""
Scoped ownership of the terminal.

`TerminalSession` is a context manager that puts the input side into cbreak
mode (no line buffering, no echo, signals still delivered), switches to the
alternate screen, hides the cursor and turns on SGR mouse reporting. The
restore path is registered with `atexit` before anything is changed and is
guarded so it runs exactly once, whether the session ends by a quit key, an
exception, SIGINT (KeyboardInterrupt) or SIGTERM (SystemExit).

A SIGWINCH sets a resize flag and writes to a self-pipe that the session's
reader also waits on, so the menu is redrawn without waiting for a key.

When stdin/stdout are redirected (e.g. `boxmenu pick < items.txt > out`),
the session talks to /dev/tty instead.
"""

from __future__ import annotations

import atexit
import logging
import os
import signal
import sys
import termios
from typing import Any, Optional, TextIO

from .ansi import ALT_SCREEN_OFF, ALT_SCREEN_ON, HIDE_CURSOR, MOUSE_OFF, MOUSE_ON, RESET, SHOW_CURSOR
from .config import MenuConfig
from .errors import TerminalError
from .keys import TtyReader

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"
SIGTERM_EXIT_STATUS = 128 + signal.SIGTERM


def _raise_sigterm(signum, frame):
    raise SystemExit(SIGTERM_EXIT_STATUS)


class TerminalSession:
    def __init__(
        self,
        config: Optional[MenuConfig] = None,
        in_fd: Optional[int] = None,
        out: Optional[TextIO] = None,
        handle_signals: bool = True,
    ):
        self.config = config or MenuConfig()
        self.in_fd = in_fd
        self.out = out
        self.handle_signals = handle_signals
        self.resized = False
        self.active = False
        self._owned_fd: Optional[int] = None
        self._owned_out: Optional[TextIO] = None
        self._saved_attrs: Optional[list] = None
        self._saved_handlers: dict[int, Any] = {}
        self._wake_r: Optional[int] = None
        self._wake_w: Optional[int] = None

    # -------------------------------------------------------------------------
    # Acquire
    # -------------------------------------------------------------------------
    def _open_streams(self) -> None:
        if self.in_fd is None:
            if sys.stdin is not None and sys.stdin.isatty():
                self.in_fd = sys.stdin.fileno()
            else:
                self._owned_fd = os.open(TTY_PATH, os.O_RDONLY)
                self.in_fd = self._owned_fd
        if self.out is None:
            if sys.stdout is not None and sys.stdout.isatty():
                self.out = sys.stdout
            else:
                self._owned_out = open(TTY_PATH, "w", encoding="utf-8")
                self.out = self._owned_out

    def _set_cbreak(self) -> None:
        attrs = termios.tcgetattr(self.in_fd)
        # ISIG stays on so Ctrl+C arrives as KeyboardInterrupt
        attrs[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN)
        attrs[1] &= ~(termios.IXON | termios.ICRNL | termios.INLCR | termios.IGNCR)
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(self.in_fd, termios.TCSANOW, attrs)

    def _install_signals(self) -> None:
        if not self.handle_signals:
            return
        handlers = {signal.SIGTERM: _raise_sigterm}
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is not None:
            handlers[sigwinch] = self._on_resize
            self._wake_r, self._wake_w = os.pipe()
            os.set_blocking(self._wake_r, False)
            os.set_blocking(self._wake_w, False)
        for signum, handler in handlers.items():
            self._saved_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, handler)

    def _on_resize(self, signum, frame) -> None:
        self.resized = True
        if self._wake_w is not None:
            try:
                os.write(self._wake_w, b"\0")
            except BlockingIOError:
                # pipe full: a wake-up is already pending
                pass

    def __enter__(self) -> "TerminalSession":
        atexit.register(self.restore)
        self.active = True
        try:
            self._open_streams()
            self._saved_attrs = termios.tcgetattr(self.in_fd)
            self._set_cbreak()
            self._install_signals()
            modes = ""
            if self.config.alt_screen:
                modes += ALT_SCREEN_ON
            modes += HIDE_CURSOR
            if self.config.mouse:
                modes += MOUSE_ON
            self.write(modes)
        except (OSError, termios.error, ValueError) as e:
            self.restore()
            raise TerminalError(f"Cannot take over the terminal: {e}") from e
        logger.debug("Terminal session started on fd %s", self.in_fd)
        return self

    # -------------------------------------------------------------------------
    # Use
    # -------------------------------------------------------------------------
    def write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def reader(self) -> TtyReader:
        return TtyReader(self.in_fd, wake_fd=self._wake_r)

    def consume_resize(self) -> bool:
        """Return True (once) if the window was resized since the last call."""
        resized, self.resized = self.resized, False
        return resized

    # -------------------------------------------------------------------------
    # Release
    # -------------------------------------------------------------------------
    def restore(self) -> None:
        """Undo everything `__enter__` did. Safe to call repeatedly."""
        if not self.active:
            return
        self.active = False
        atexit.unregister(self.restore)

        if self.out is not None:
            modes = MOUSE_OFF if self.config.mouse else ""
            if self.config.alt_screen:
                modes += ALT_SCREEN_OFF
            modes += SHOW_CURSOR + RESET
            try:
                self.write(modes)
            except (OSError, ValueError) as e:
                logger.debug("Could not reset terminal modes: %s", e)

        if self._saved_attrs is not None:
            try:
                termios.tcsetattr(self.in_fd, termios.TCSADRAIN, self._saved_attrs)
            except termios.error as e:
                logger.warning("Could not restore terminal attributes: %s", e)
            self._saved_attrs = None

        for signum, handler in self._saved_handlers.items():
            signal.signal(signum, handler)
        self._saved_handlers.clear()
        for fd in (self._wake_r, self._wake_w):
            if fd is not None:
                os.close(fd)
        self._wake_r = self._wake_w = None

        if self._owned_out is not None:
            self._owned_out.close()
            self._owned_out = self.out = None
        if self._owned_fd is not None:
            os.close(self._owned_fd)
            self._owned_fd = self.in_fd = None
        logger.debug("Terminal session restored")

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.restore()
        if exc_type is not None and exc_type not in (KeyboardInterrupt, SystemExit):
            logger.error("Session ended with %s: %s", exc_type.__name__, exc_val)
