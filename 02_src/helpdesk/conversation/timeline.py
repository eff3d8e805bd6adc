"""Conversation Reconciler: merges history and live events into one timeline."""

from typing import Iterable

from ..logging_config import get_logger
from ..models import Message

logger = get_logger(__name__)


def merge(history: Iterable[Message], live_events: Iterable[Message]) -> list[Message]:
    """History first, then live events in arrival order."""
    return [*history, *live_events]


class ConversationTimeline:
    """Append-only timeline for the active conversation.

    While a history load is pending, live events are buffered and appended
    after the history once it resolves. Each load gets a token; a result
    for an older token or another conversation is discarded.
    """

    def __init__(self):
        self._conversation_id: str | None = None
        self._messages: list[Message] = []
        self._pending: list[Message] = []
        self._loading = False
        self._loaded = False
        self._token = 0

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_loaded(self) -> bool:
        """True once a history load has been applied."""
        return self._loaded

    @property
    def messages(self) -> list[Message]:
        return self._messages.copy()

    @property
    def pending(self) -> list[Message]:
        return self._pending.copy()

    def reset(self, conversation_id: str) -> None:
        """Drop the previous conversation and start an empty one."""
        self._conversation_id = conversation_id
        self._messages = []
        self._pending = []
        self._loading = False
        self._loaded = False
        self._token += 1

    def clear(self) -> None:
        """Forget everything (view closed)."""
        self._conversation_id = None
        self._messages = []
        self._pending = []
        self._loading = False
        self._loaded = False
        self._token += 1

    def begin_load(self, conversation_id: str) -> int:
        """Start buffering live events until the matching apply_history."""
        if conversation_id != self._conversation_id:
            self.reset(conversation_id)
        self._token += 1
        self._loading = True
        return self._token

    def apply_history(
        self, conversation_id: str, token: int, history: list[Message]
    ) -> bool:
        """Install a loaded history. Returns False for stale results."""
        if conversation_id != self._conversation_id or token != self._token:
            logger.debug(
                "Discarding stale history for %s (token %s, current %s/%s)",
                conversation_id,
                token,
                self._conversation_id,
                self._token,
            )
            return False

        self._messages = merge(history, self._pending)
        self._pending = []
        self._loading = False
        self._loaded = True
        return True

    def append_live(self, conversation_id: str, message: Message) -> bool:
        """Add a live event. Returns False if it was dropped."""
        if conversation_id != self._conversation_id:
            logger.debug("Dropping live message for inactive %s", conversation_id)
            return False

        if message.id is not None and self._has_id(message.id):
            return False

        if self._loading:
            self._pending.append(message)
        else:
            self._messages.append(message)
        return True

    def _has_id(self, message_id: str) -> bool:
        return any(
            msg.id == message_id for msg in (*self._messages, *self._pending)
        )
