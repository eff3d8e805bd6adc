"""Toast-style operator notifications."""

from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..logging_config import get_logger
from ..models import Notification, NotificationLevel

logger = get_logger(__name__)


class INotifier(Protocol):
    """Non-blocking notifications for the operator."""

    def success(self, text: str) -> None:
        ...

    def info(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...


class Notifier:
    """Keeps the most recent notifications for the UI to pick up."""

    def __init__(self, maxlen: int = 100):
        self._items: deque[Notification] = deque(maxlen=maxlen)

    def success(self, text: str) -> None:
        self._push(NotificationLevel.SUCCESS, text)

    def info(self, text: str) -> None:
        self._push(NotificationLevel.INFO, text)

    def error(self, text: str) -> None:
        self._push(NotificationLevel.ERROR, text)

    def recent(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        """Return and forget all pending notifications."""
        items = list(self._items)
        self._items.clear()
        return items

    def _push(self, level: NotificationLevel, text: str) -> None:
        logger.info("Notify operator [%s]: %s", level.value, text)
        self._items.append(
            Notification(level=level, text=text, created_at=datetime.now(timezone.utc))
        )
