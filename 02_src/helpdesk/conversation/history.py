"""History Loader: one-shot fetch of a conversation's durable log."""

from datetime import datetime, timezone
from typing import Protocol

from ..backend import IBackendClient
from ..errors import NotFoundError, ProtocolError, TransportError
from ..logging_config import get_logger
from ..models import Message
from ..protocol import decode_message

logger = get_logger(__name__)


class IHistoryLoader(Protocol):
    """Fetch the ordered message log for a conversation."""

    async def load(self, conversation_id: str) -> list[Message]:
        """Return the history, or [] if it could not be read."""
        ...


class HistoryLoader:
    """Fail-open history reader: read failures become an empty history."""

    def __init__(self, backend: IBackendClient):
        self._backend = backend

    async def load(self, conversation_id: str) -> list[Message]:
        """Return the history, or [] if it could not be read."""
        if not conversation_id:
            raise NotFoundError("No conversation id provided")

        try:
            payload = await self._backend.fetch_history(conversation_id)
        except (TransportError, ProtocolError) as e:
            logger.error("Failed to fetch history for %s: %s", conversation_id, e)
            return []

        entries = payload.get("messages")
        if not isinstance(entries, list):
            logger.warning(
                "Unexpected history format for %s: %s",
                conversation_id,
                str(payload)[:100],
            )
            return []

        received_at = datetime.now(timezone.utc)
        try:
            messages = [decode_message(entry, received_at) for entry in entries]
        except ProtocolError as e:
            logger.error("Failed to parse history for %s: %s", conversation_id, e)
            return []

        logger.debug("Loaded %d messages for %s", len(messages), conversation_id)
        return messages
