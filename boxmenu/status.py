"""Status line state shown between the list and the footer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class StatusLevel(Enum):
    OK = "green"
    INFO = "cyan"
    WARN = "yellow"
    ERROR = "red"

    @property
    def color(self) -> str:
        return self.value


@dataclass
class SessionStatus:
    level: StatusLevel = StatusLevel.INFO
    message: str = ""

    def set(self, level: StatusLevel, message: str) -> None:
        self.level = level
        self.message = message

    def clear(self) -> None:
        self.level = StatusLevel.INFO
        self.message = ""

    @property
    def text(self) -> str:
        """Plain `LEVEL: message`, or '' when there is nothing to show."""
        if not self.message:
            return ""
        return f"{self.level.name}: {self.message}"

    def snapshot(self) -> Tuple[StatusLevel, str]:
        return self.level, self.message
