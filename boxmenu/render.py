#!/usr/bin/env python3
"""
Frame composition for the boxed menu.

Layout, top to bottom (row numbers are 1-based terminal rows):

    ┌──────────────┐   1
    │    title     │   2 .. 1 + title_rows
    ├──────────────┤
    │ items ...    │   header_offset .. header_offset + page_size - 1
    │ ▲/▼ [n/N]    │   scroll indicator row (always reserved)
    ├──────────────┤
    │ PREVIEW:     │   only when preview_height > 0
    │ ...          │
    │ STATUS       │
    └──────────────┘
     footer / help

The box height never depends on the number of items, so the rows a mouse
click maps to stay fixed for the whole session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from .ansi import (
    CLEAR_EOL,
    CLEAR_EOS,
    CLEAR_SCREEN,
    CURSOR_HOME,
    INVERSE,
    RESET,
    center,
    color_text,
    pad_to_width,
    strip_escapes,
    truncate_visible,
    visual_length,
)
from .config import MenuConfig
from .model import Item, MenuModel
from .status import SessionStatus

DEFAULT_FOOTER = (" [↑/↓] Select  [PgUp/PgDn] Page  [Enter] Activate  [q] Quit",)

SELECT_MARKER = "➤"
ACTIVE_MARKER = "●"


@dataclass(frozen=True)
class RenderFrame:
    """Immutable snapshot of one draw; `lines` excludes line-clearing codes."""

    lines: Tuple[str, ...]
    header_offset: int

    @property
    def height(self) -> int:
        return len(self.lines)

    def plain_lines(self) -> List[str]:
        return [strip_escapes(line) for line in self.lines]

    def row(self, terminal_row: int) -> str:
        """Plain text of a 1-based terminal row."""
        return strip_escapes(self.lines[terminal_row - 1])

    def to_text(self) -> str:
        """Terminal payload: each line cleared to EOL, the rest of the screen cleared."""
        return "\n".join(line + CLEAR_EOL for line in self.lines) + CLEAR_EOS


class Renderer:
    def __init__(
        self,
        config: MenuConfig,
        title: str = "",
        version: str = "",
        header_lines: Optional[Callable[[MenuModel], Sequence[str]]] = None,
        footer_lines: Optional[Sequence[str]] = None,
        info_line: Optional[Callable[[MenuModel], str]] = None,
    ):
        self.config = config
        self.title = title
        self.version = version
        self.header_lines = header_lines
        self.footer_lines = tuple(DEFAULT_FOOTER if footer_lines is None else footer_lines)
        self.info_line = info_line

    # -------------------------------------------------------------------------
    # Box pieces
    # -------------------------------------------------------------------------
    def _rule(self, left: str, right: str) -> str:
        return color_text(left + "─" * self.config.inner_width + right, self.config.border_color)

    def _box_line(self, content: str) -> str:
        wall = color_text("│", self.config.border_color)
        return f"{wall}{pad_to_width(content, self.config.inner_width)}{RESET}{wall}"

    def _title_line(self) -> str:
        room = self.config.inner_width - 3 - (len(self.version) + 1 if self.version else 0)
        parts = [color_text(truncate_visible(self.title, max(1, room)), "white")]
        if self.version:
            parts.append(color_text(self.version, self.config.accent_color))
        return center(f" {' '.join(parts)} ", self.config.inner_width)

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------
    def item_line(self, item: Item, selected: bool) -> str:
        accent = self.config.accent_color
        # " ➤ " + inverse padding on both sides of the body
        avail = self.config.inner_width - 5
        if item.icon:
            avail -= 2
        if item.active:
            avail -= 2

        secondary = ""
        if item.secondary:
            secondary = truncate_visible(item.secondary, max(1, avail // 2))
            avail -= visual_length(secondary) + 4
        label = truncate_visible(item.label, max(1, avail))

        if selected:
            # embedded resets would end the inverse video early
            body = f"{item.icon} " if item.icon else ""
            body += f"{strip_escapes(secondary)} :: {strip_escapes(label)}" if secondary else strip_escapes(label)
            line = f" {color_text(SELECT_MARKER, accent)} {INVERSE} {body} {RESET}"
        else:
            line = "    "
            if item.icon:
                line += color_text(item.icon, item.color) + " "
            if secondary:
                line += color_text(secondary, accent) + color_text(" :: ", "grey")
            line += color_text(label, "white")
        if item.active:
            line += " " + color_text(ACTIVE_MARKER, "green")
        return line

    def indicator_line(self, model: MenuModel) -> str:
        if model.item_count <= model.page_size:
            return ""
        start, end = model.visible_range()
        parts = []
        if start > 0:
            parts.append("▲ more above")
        if end < model.item_count:
            parts.append("▼ more below")
        parts.append(f"[{model.selected_index + 1}/{model.item_count}]")
        return " " + color_text("  ".join(parts), "grey")

    def preview_lines(self, item: Optional[Item]) -> List[str]:
        height = self.config.preview_height
        if height <= 0:
            return []
        text = item.preview if item is not None else ""
        rows = text.splitlines()[:height]
        rows += [""] * (height - len(rows))
        lines = [" " + color_text("PREVIEW:", "white")]
        lines += [" " + truncate_visible(row, self.config.inner_width - 1) if row else "" for row in rows]
        return lines

    def status_line(self, status: SessionStatus) -> str:
        text = status.text
        if not text:
            return ""
        return " " + color_text(truncate_visible(text, self.config.inner_width - 1), status.level.color)

    # -------------------------------------------------------------------------
    # Frame
    # -------------------------------------------------------------------------
    def build_frame(self, model: MenuModel, status: SessionStatus) -> RenderFrame:
        cfg = self.config
        lines: List[str] = [self._rule("┌", "┐"), self._box_line(self._title_line())]

        extra = list(self.header_lines(model)) if self.header_lines else []
        for i in range(cfg.title_rows - 1):
            text = extra[i] if i < len(extra) else ""
            lines.append(self._box_line(" " + truncate_visible(text, cfg.inner_width - 1) if text else ""))
        lines.append(self._rule("├", "┤"))

        start, end = model.visible_range()
        rows = [self._box_line(self.item_line(model.items[i], i == model.selected_index)) for i in range(start, end)]
        if not model.items:
            rows.append(self._box_line("    " + color_text("(no items)", "grey")))
        rows += [self._box_line("")] * (cfg.page_size - len(rows))
        lines += rows
        lines.append(self._box_line(self.indicator_line(model)))
        lines.append(self._rule("├", "┤"))

        lines += [self._box_line(row) for row in self.preview_lines(model.selected_item)]
        lines.append(self._box_line(self.status_line(status)))
        lines.append(self._rule("└", "┘"))

        lines += [color_text(text, cfg.accent_color) for text in self.footer_lines]
        if self.info_line is not None:
            info = self.info_line(model)
            if info:
                lines.append(color_text(f" {info}", "grey"))
        return RenderFrame(tuple(lines), header_offset=cfg.header_offset)

    def draw(self, frame: RenderFrame, out: TextIO, clear: bool = False) -> None:
        """Overwrite the screen in place: cursor home, then every line."""
        prefix = CURSOR_HOME + (CLEAR_SCREEN if clear else "")
        out.write(prefix + frame.to_text())
        out.flush()
