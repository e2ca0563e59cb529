from __future__ import annotations

import os
from collections import deque

import pytest

from boxmenu.keys import (
    EscapeParser,
    InputDecoder,
    Key,
    KeyName,
    MouseEvent,
    NamedKey,
    TtyReader,
    Unrecognized,
    WakeUp,
    decode_escape,
    decode_mouse,
)


class FakeReader:
    """In-memory CharReader. A None entry simulates an escape timeout."""

    def __init__(self, chars):
        self.chars = deque(chars)
        self.timeouts = []

    def read(self, timeout):
        self.timeouts.append(timeout)
        if not self.chars:
            if timeout is None:
                raise EOFError
            return None
        ch = self.chars.popleft()
        if ch is None:
            return None
        return ch


def _events(text, **kw):
    decoder = InputDecoder(FakeReader(text), **kw)
    out = []
    while True:
        try:
            out.append(decoder.next_event())
        except EOFError:
            return out


@pytest.mark.parametrize(
    "body,name",
    [
        ("[A", KeyName.UP),
        ("OA", KeyName.UP),
        ("[B", KeyName.DOWN),
        ("OB", KeyName.DOWN),
        ("[C", KeyName.RIGHT),
        ("OC", KeyName.RIGHT),
        ("[D", KeyName.LEFT),
        ("OD", KeyName.LEFT),
        ("[5~", KeyName.PAGE_UP),
        ("[6~", KeyName.PAGE_DOWN),
        ("[H", KeyName.HOME),
        ("[1~", KeyName.HOME),
        ("[F", KeyName.END),
        ("[4~", KeyName.END),
    ],
)
def test_decode_escape_named_keys(body, name):
    assert decode_escape(body) == NamedKey(name)


def test_decode_escape_modified_arrow():
    # xterm sends ESC [ 1 ; 5 A for Ctrl+Up
    assert decode_escape("[1;5A") == NamedKey(KeyName.UP)


def test_decode_escape_empty_is_escape_key():
    assert decode_escape("") == NamedKey(KeyName.ESCAPE)


@pytest.mark.parametrize("body", ["[9~", "[Z", "x", "[12", "[A junk"])
def test_decode_escape_unknown(body):
    assert isinstance(decode_escape(body), Unrecognized)


def test_decode_mouse_press():
    assert decode_mouse("0;5;7M") == MouseEvent(button=0, x=5, y=7, is_press=True)


def test_decode_mouse_release_and_wheel():
    release = decode_mouse("0;5;7m")
    assert release.is_press is False and not release.is_primary_press
    assert decode_mouse("64;1;1M").is_wheel_up
    assert decode_mouse("65;1;1M").is_wheel_down


@pytest.mark.parametrize("body", ["x;5;7M", "0;5;7", "0;5M", "0;5;7;1M", "0;;7M", "0;5;7X", ""])
def test_decode_mouse_malformed(body):
    assert isinstance(decode_mouse(body), Unrecognized)


def test_escape_parser_rejects_overlong_sequences():
    parser = EscapeParser()
    parser.feed("[")
    finished = False
    for _ in range(EscapeParser.MAX_LENGTH + 1):
        finished = parser.feed("1")
        if finished:
            break
    assert finished
    assert isinstance(parser.result(), Unrecognized)


def test_plain_and_control_keys():
    events = _events(["a", "\r", "\x7f", "\x03"])
    assert events == [
        Key("a"),
        NamedKey(KeyName.ENTER),
        NamedKey(KeyName.BACKSPACE),
        Key("\x03"),
    ]


def test_full_sgr_mouse_sequence_from_stream():
    events = _events(list("\x1b[<0;5;7M"))
    assert events == [MouseEvent(0, 5, 7, True)]


def test_lone_escape_after_timeout():
    events = _events(["\x1b", None, "q"])
    assert events == [NamedKey(KeyName.ESCAPE), Key("q")]


def test_escape_continuation_uses_bounded_timeout():
    reader = FakeReader(list("\x1b[A"))
    decoder = InputDecoder(reader, escape_timeout=0.02)
    assert decoder.next_event() == NamedKey(KeyName.UP)
    assert reader.timeouts == [None, 0.02, 0.02]


def test_malformed_mouse_is_discarded_without_leaking_fragments():
    events = _events(list("\x1b[<x;5;7M"))
    assert len(events) == 1
    assert isinstance(events[0], Unrecognized)


def test_truncated_sequence_then_next_key():
    events = _events(["\x1b", "[", "<", "1", None, "j"])
    assert isinstance(events[0], Unrecognized)
    assert events[1:] == [Key("j")]


def test_tty_reader_decodes_utf8_and_times_out():
    r, w = os.pipe()
    try:
        os.write(w, "é➤".encode("utf-8"))
        reader = TtyReader(r)
        assert reader.read(None) == "é"
        assert reader.read(0.1) == "➤"
        assert reader.read(0.01) is None
    finally:
        os.close(r)
        os.close(w)


def test_tty_reader_raises_eof_when_closed():
    r, w = os.pipe()
    os.close(w)
    try:
        with pytest.raises(EOFError):
            TtyReader(r).read(None)
    finally:
        os.close(r)


def test_tty_reader_wake_fd_interrupts_blocking_read():
    r, w = os.pipe()
    wake_r, wake_w = os.pipe()
    try:
        reader = TtyReader(r, wake_fd=wake_r)
        os.write(wake_w, b"\0")
        with pytest.raises(WakeUp):
            reader.read(None)
        os.write(w, b"j")
        assert reader.read(None) == "j"
    finally:
        for fd in (r, w, wake_r, wake_w):
            os.close(fd)


def test_tty_reader_bounded_reads_ignore_wake_fd():
    r, w = os.pipe()
    wake_r, wake_w = os.pipe()
    try:
        reader = TtyReader(r, wake_fd=wake_r)
        os.write(wake_w, b"\0")
        assert reader.read(0.01) is None
        os.write(w, b"[")
        assert reader.read(0.1) == "["
    finally:
        for fd in (r, w, wake_r, wake_w):
            os.close(fd)
