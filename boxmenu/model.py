#!/usr/bin/env python3
"""
Menu state: the item list, the selection and its viewport.

Every navigation method changes `selected_index` and then recomputes the
scroll offset, so `scroll_offset <= selected_index < scroll_offset + page_size`
holds whenever the list is non-empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from .actions import Action, ActionResult, invoke_action
from .config import MenuConfig
from .viewport import ViewportState, clamp_selection, recompute_scroll, visible_range


@dataclass(frozen=True)
class Item:
    """One selectable row. `payload` is handed to the action untouched."""

    label: str
    secondary: str = ""
    payload: Any = None
    icon: str = ""
    color: Optional[str] = None
    preview: str = ""
    active: bool = False


class EdgePolicy(Enum):
    """What single-step movement does past the first/last item."""

    CLAMP = "clamp"
    WRAP = "wrap"


class MenuModel:
    def __init__(
        self,
        items: Iterable[Item] = (),
        *,
        page_size: int = 10,
        header_offset: int = 4,
        edge_policy: EdgePolicy = EdgePolicy.CLAMP,
    ):
        self.items: List[Item] = list(items)
        self.viewport = ViewportState(page_size=page_size)
        self.header_offset = header_offset
        self.edge_policy = edge_policy
        self.selected_index = 0

    @classmethod
    def from_config(cls, items: Iterable[Item], config: MenuConfig) -> "MenuModel":
        return cls(
            items,
            page_size=config.page_size,
            header_offset=config.header_offset,
            edge_policy=EdgePolicy(config.edge_policy),
        )

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def page_size(self) -> int:
        return self.viewport.page_size

    @property
    def scroll_offset(self) -> int:
        return self.viewport.scroll_offset

    @property
    def selected_item(self) -> Optional[Item]:
        if not self.items:
            return None
        return self.items[self.selected_index]

    def visible_range(self) -> Tuple[int, int]:
        return visible_range(self.scroll_offset, self.item_count, self.page_size)

    def snapshot(self) -> Tuple[int, int, int]:
        return self.selected_index, self.scroll_offset, self.item_count

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------
    def _select(self, index: int) -> None:
        self.selected_index = clamp_selection(index, self.item_count)
        self.viewport.scroll_offset = recompute_scroll(
            self.selected_index, self.viewport.scroll_offset, self.item_count, self.page_size
        )

    def move_relative(self, delta: int, policy: Optional[EdgePolicy] = None) -> None:
        if not self.items:
            return
        index = self.selected_index + delta
        if (policy or self.edge_policy) is EdgePolicy.WRAP:
            index %= self.item_count
        self._select(index)

    def move_page(self, direction: int) -> None:
        """Jump a page up (-1) or down (+1); never wraps."""
        self.move_relative(direction * self.page_size, policy=EdgePolicy.CLAMP)

    def move_to_edge(self, is_end: bool) -> None:
        if not self.items:
            return
        self._select(self.item_count - 1 if is_end else 0)

    def row_to_index(self, row: int) -> Optional[int]:
        """Map a 1-based terminal row to an item index, or None if off-list."""
        if not self.header_offset <= row < self.header_offset + self.page_size:
            return None
        candidate = row - self.header_offset + self.scroll_offset
        if 0 <= candidate < self.item_count:
            return candidate
        return None

    def select_at(self, row: int) -> bool:
        """Select the item drawn on terminal `row`; False (no change) if none."""
        index = self.row_to_index(row)
        if index is None:
            return False
        self._select(index)
        return True

    # -------------------------------------------------------------------------
    # Items / actions
    # -------------------------------------------------------------------------
    def replace_items(self, items: Iterable[Item]) -> None:
        """Swap in a re-enumerated list, keeping the selection index in range."""
        self.items = list(items)
        self._select(self.selected_index)

    def activate(self, apply: Action) -> Optional[ActionResult]:
        item = self.selected_item
        if item is None:
            return None
        return invoke_action(apply, item.payload)
