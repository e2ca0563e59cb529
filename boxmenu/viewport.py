"""
Scroll-window math for the item list.

Pure functions only; `MenuModel` calls `recompute_scroll` after every
selection change so the renderer never sees an off-screen selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class ViewportState:
    """Scroll position of the list. `page_size` is fixed for a session."""

    page_size: int
    scroll_offset: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")


def clamp_selection(selected_index: int, item_count: int) -> int:
    if item_count <= 0:
        return 0
    return max(0, min(selected_index, item_count - 1))


def max_scroll(item_count: int, page_size: int) -> int:
    return max(0, item_count - page_size)


def recompute_scroll(selected_index: int, scroll_offset: int, item_count: int, page_size: int) -> int:
    """Return the scroll offset that keeps `selected_index` on screen.

    The window only moves as far as needed: up to the selection when it is
    above, down so the selection is the last row when it is below. The result
    is then clamped to [0, max(0, item_count - page_size)].
    """
    if item_count <= 0:
        return 0
    selected_index = clamp_selection(selected_index, item_count)
    if selected_index < scroll_offset:
        scroll_offset = selected_index
    elif selected_index >= scroll_offset + page_size:
        scroll_offset = selected_index - page_size + 1
    return max(0, min(scroll_offset, max_scroll(item_count, page_size)))


def visible_range(scroll_offset: int, item_count: int, page_size: int) -> Tuple[int, int]:
    """Half-open [start, end) range of item indices shown on screen."""
    start = max(0, min(scroll_offset, item_count))
    return start, min(scroll_offset + page_size, item_count)
