from __future__ import annotations

import pytest

from boxmenu import ansi


def test_color_text_handles_unknown():
    assert ansi.color_text("plain", None) == "plain"
    assert ansi.color_text("plain", "unknown") == "plain"
    colored = ansi.color_text("hi", "red")
    assert colored.startswith("\x1b[1;31m")
    assert colored.endswith(ansi.RESET)


def test_visual_length_ignores_color_codes():
    s = f"{ansi.sgr('cyan')}abc{ansi.RESET} {ansi.INVERSE}de{ansi.RESET}"
    assert ansi.visual_length(s) == 6


def test_visual_length_ignores_cursor_moves_and_private_modes():
    s = f"{ansi.CURSOR_HOME}x{ansi.CLEAR_EOL}{ansi.HIDE_CURSOR}y\x1b[12;40H"
    assert ansi.visual_length(s) == 2


def test_strip_escapes_keeps_newlines_and_other_bytes():
    s = "line1\x1b[1;32m\nline2\t\x1b[0m!"
    assert ansi.strip_escapes(s) == "line1\nline2\t!"


def test_strip_escapes_passes_malformed_sequences_through():
    unterminated = "abc\x1b[12;"
    assert ansi.strip_escapes(unterminated) == unterminated
    lone = "a\x1bb"
    assert ansi.strip_escapes(lone) == lone


@pytest.mark.parametrize(
    "s",
    [
        "",
        "plain",
        "\x1b[31mred\x1b[0m",
        "\x1b\x1b[31m[31mnested",
        "\x1b[\x1b[0m1mfoo",
        "tail\x1b[",
    ],
)
def test_strip_escapes_is_idempotent(s):
    once = ansi.strip_escapes(s)
    assert ansi.strip_escapes(once) == once
    assert ansi.visual_length(once) == len(once)


def test_pad_to_width_counts_visible_columns():
    content = ansi.color_text("abc", "green")
    padded = ansi.pad_to_width(content, 10)
    assert padded.startswith(content)
    assert ansi.visual_length(padded) == 10


def test_pad_to_width_never_truncates():
    content = ansi.color_text("x" * 12, "green")
    assert ansi.pad_to_width(content, 5) == content


def test_center_splits_padding():
    assert ansi.center("ab", 6) == "  ab  "
    assert ansi.center("abc", 6) == " abc  "
    assert ansi.center("toolong", 3) == "toolong"


def test_truncate_visible_adds_ellipsis():
    assert ansi.truncate_visible("abcdef", 10) == "abcdef"
    assert ansi.truncate_visible("abcdef", 4) == "abc…"
    assert ansi.truncate_visible("abcdef", 0) == ""


def test_truncate_visible_keeps_sequences_whole():
    red = "\x1b[31m"
    text = "a" * 6 + red + "b" * 10 + ansi.RESET
    cut = ansi.truncate_visible(text, 9)
    assert cut == "a" * 6 + red + "bb…" + ansi.RESET
    assert ansi.visual_length(cut) == 9
    assert ansi.strip_escapes(cut) == "aaaaaabb…"


def test_truncate_visible_cut_before_any_escape():
    text = "a" * 20 + "\x1b[1;32m" + "tail"
    cut = ansi.truncate_visible(text, 5)
    assert cut == "aaaa…"
    assert "\x1b" not in cut


def test_truncate_visible_leaves_fitting_colored_text():
    text = ansi.color_text("short", "green")
    assert ansi.truncate_visible(text, 5) == text
