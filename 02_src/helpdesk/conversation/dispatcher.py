"""Outbound Dispatcher: operator replies over HTTP, then a history refresh."""

from typing import Awaitable, Callable, Protocol

from ..backend import IBackendClient
from ..errors import BackendRejection, SendInProgressError, ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)


RefreshCallback = Callable[[str], Awaitable[None]]


class IOutboundDispatcher(Protocol):
    """Send operator-authored messages."""

    async def send(self, conversation_id: str, text: str) -> None:
        """Send text; raises on validation, transport or backend failure."""
        ...

    def is_sending(self, conversation_id: str) -> bool:
        """True while a send for this conversation is in flight."""
        ...


class OutboundDispatcher:
    """Posts replies and refreshes history on success.

    The live channel does not reliably echo the sender's own message, so a
    successful send always re-reads history instead.
    """

    def __init__(
        self,
        backend: IBackendClient,
        refresh: RefreshCallback,
        agent_name: str = "system",
    ):
        self._backend = backend
        self._refresh = refresh
        self._agent_name = agent_name
        self._in_flight: set[str] = set()

    def is_sending(self, conversation_id: str) -> bool:
        return conversation_id in self._in_flight

    async def send(self, conversation_id: str, text: str) -> None:
        """Send text; raises on validation, transport or backend failure."""
        if not conversation_id:
            raise ValidationError("Cannot send message: conversation id is missing")
        if not text or not text.strip():
            raise ValidationError("Cannot send message: message is empty")
        if conversation_id in self._in_flight:
            raise SendInProgressError(
                f"A message is already being sent for {conversation_id}"
            )

        self._in_flight.add(conversation_id)
        try:
            response = await self._backend.post_reply(
                conversation_id, text, self._agent_name
            )
            if response.get("status") != "success":
                logger.error(
                    "Backend rejected reply for %s: %s", conversation_id, response
                )
                raise BackendRejection(
                    "Backend reported an issue sending the message", response
                )
        finally:
            self._in_flight.discard(conversation_id)

        logger.info("Reply sent for %s", conversation_id)
        await self._refresh(conversation_id)
