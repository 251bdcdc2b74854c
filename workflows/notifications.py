"""
workflows/notifications.py

Transient user-facing notices.

Workflow code pushes notices here instead of talking to the UI; the Streamlit
layer drains the board on every rerun and shows each notice as a toast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Level(str, Enum):
    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


@dataclass(frozen=True)
class Notice:
    level: Level
    message: str


@dataclass
class NoticeBoard:
    items: list[Notice] = field(default_factory=list)

    def push(self, level: Level, message: str) -> None:
        self.items.append(Notice(level, message))

    def success(self, message: str) -> None:
        self.push(Level.success, message)

    def info(self, message: str) -> None:
        self.push(Level.info, message)

    def warning(self, message: str) -> None:
        self.push(Level.warning, message)

    def error(self, message: str) -> None:
        self.push(Level.error, message)

    def drain(self) -> list[Notice]:
        out, self.items = self.items, []
        return out

    def messages(self, level: Level | None = None) -> list[str]:
        return [n.message for n in self.items if level is None or n.level == level]
