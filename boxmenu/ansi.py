#!/usr/bin/env python3
"""
ANSI helpers: control-sequence constants plus width math that ignores escapes.

Every width computation in boxmenu goes through `visual_length`, which counts
characters after removing well-formed control sequences
(ESC '[' parameter-bytes intermediate-bytes final-byte). Color codes and
cursor moves therefore never take up room in the box layout.
"""

from __future__ import annotations

ESC = "\x1b"
CSI = f"{ESC}["

RESET = f"{CSI}0m"
INVERSE = f"{CSI}7m"
CURSOR_HOME = f"{CSI}H"
CLEAR_SCREEN = f"{CSI}2J"
CLEAR_EOL = f"{CSI}K"
CLEAR_EOS = f"{CSI}J"
HIDE_CURSOR = f"{CSI}?25l"
SHOW_CURSOR = f"{CSI}?25h"
ALT_SCREEN_ON = f"{CSI}?1049h"
ALT_SCREEN_OFF = f"{CSI}?1049l"
# click tracking, drag tracking, SGR extended coordinates
MOUSE_ON = f"{CSI}?1000h{CSI}?1002h{CSI}?1006h"
MOUSE_OFF = f"{CSI}?1000l{CSI}?1002l{CSI}?1006l"

ANSI_CODES = {
    "default": "",
    "red": "1;31",
    "green": "1;32",
    "yellow": "1;33",
    "blue": "1;34",
    "magenta": "1;35",
    "cyan": "1;36",
    "white": "1;37",
    "grey": "90",
    "gray": "90",
    "bright_magenta": "1;95",
    "comment": "36",
}


def sgr(color: str | None) -> str:
    """Return the SGR sequence for a named color ('' for None/unknown)."""
    if not color:
        return ""
    code = ANSI_CODES.get(color.lower())
    if not code:
        return ""
    return f"{CSI}{code}m"


def color_text(text: str, color: str | None) -> str:
    """Wrap `text` in an ANSI color code (safe for None/unknown colors)."""
    prefix = sgr(color)
    if not prefix:
        return text
    return f"{prefix}{text}{RESET}"


def _is_param(ch: str) -> bool:
    return "\x30" <= ch <= "\x3f"


def _is_intermediate(ch: str) -> bool:
    return "\x20" <= ch <= "\x2f"


def _is_final(ch: str) -> bool:
    return "\x40" <= ch <= "\x7e"


def _csi_end(s: str, i: int) -> int:
    """End index of the well-formed CSI sequence starting at `s[i]`, or -1."""
    n = len(s)
    if s[i] != ESC or i + 1 >= n or s[i + 1] != "[":
        return -1
    j = i + 2
    while j < n and _is_param(s[j]):
        j += 1
    while j < n and _is_intermediate(s[j]):
        j += 1
    if j < n and _is_final(s[j]):
        return j + 1
    return -1


def _strip_once(s: str) -> str:
    out: list[str] = []
    i, n = 0, len(s)
    while i < n:
        end = _csi_end(s, i)
        if end > 0:
            i = end
            continue
        # plain character, or an unterminated/malformed ESC kept as is
        out.append(s[i])
        i += 1
    return "".join(out)


def strip_escapes(s: str) -> str:
    """Remove every well-formed CSI sequence, keeping all other characters.

    Malformed or unterminated sequences are left untouched. Removal is
    repeated until nothing changes, so a sequence that only becomes
    well-formed once its neighbour is removed is also stripped and the
    function is idempotent.
    """
    if not s or ESC not in s:
        return s or ""
    while True:
        stripped = _strip_once(s)
        if stripped == s:
            return s
        s = stripped


def visual_length(s: str) -> int:
    """Number of characters `s` occupies once escape sequences are removed."""
    return len(strip_escapes(s))


def pad_to_width(content: str, width: int) -> str:
    """Right-pad `content` with spaces to `width` visible columns.

    Content that is already wider than `width` is returned unchanged: cutting
    it could split an escape sequence, so callers size text beforehand
    (see `truncate_visible`).
    """
    return content + " " * max(0, width - visual_length(content))


def center(content: str, width: int) -> str:
    """Center `content` within `width` visible columns."""
    vis = visual_length(content)
    left = max(0, (width - vis) // 2)
    right = max(0, width - vis - left)
    return " " * left + content + " " * right


def truncate_visible(text: str, max_chars: int) -> str:
    """Clip `text` to `max_chars` visible columns, keeping escape sequences whole.

    Control sequences are copied untouched and never count towards the width.
    When anything is cut, the result ends with an ellipsis, followed by a
    reset if the kept part contained escapes.
    """
    s = str(text or "")
    if max_chars <= 0:
        return ""
    if visual_length(s) <= max_chars:
        return s
    out: list[str] = []
    visible = 0
    had_escape = False
    i, n = 0, len(s)
    while i < n and visible < max_chars - 1:
        end = _csi_end(s, i)
        if end > 0:
            out.append(s[i:end])
            had_escape = True
            i = end
            continue
        out.append(s[i])
        visible += 1
        i += 1
    out.append("…")
    if had_escape:
        out.append(RESET)
    return "".join(out)
