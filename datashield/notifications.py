"""
User-visible notifications.

Operations report their outcome to the person at the keyboard through a
Notifier rather than by raising. The CLI renders the collected notices with
rich; tests inspect them directly.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    """Severity of a notice."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A single message shown to the user."""

    level: NoticeLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects notices in the order they were raised."""

    def __init__(self) -> None:
        self._notices: List[Notice] = []

    def notify(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._notices.append(notice)
        logger.debug(f"{level.value}: {message}")
        return notice

    def success(self, message: str) -> Notice:
        return self.notify(NoticeLevel.SUCCESS, message)

    def info(self, message: str) -> Notice:
        return self.notify(NoticeLevel.INFO, message)

    def error(self, message: str) -> Notice:
        return self.notify(NoticeLevel.ERROR, message)

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    @property
    def last(self) -> Optional[Notice]:
        return self._notices[-1] if self._notices else None

    def errors(self) -> List[Notice]:
        return [n for n in self._notices if n.level == NoticeLevel.ERROR]

    def drain(self) -> List[Notice]:
        """Return all pending notices and forget them."""
        notices, self._notices = self._notices, []
        return notices
