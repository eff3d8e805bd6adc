"""Conversation view: the single conversation an operator has open."""

import asyncio
from functools import partial
from typing import Awaitable, Callable

from ..backend import IBackendClient
from ..connection import IConnectionManager, LiveChannel
from ..errors import (
    BackendRejection,
    NotFoundError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from ..logging_config import get_logger
from ..models import ChatFrame, ConnectionState, Frame
from ..notifications import INotifier
from .dispatcher import OutboundDispatcher
from .history import IHistoryLoader
from .timeline import ConversationTimeline

logger = get_logger(__name__)

EMPTY_HISTORY_TEXT = "No conversation history found."
SEND_FAILED_TEXT = "Failed to send message. Please try again."

SentCallback = Callable[[str], Awaitable[None]]


class ConversationView:
    """Wires history, live channel and dispatcher for one open conversation."""

    def __init__(
        self,
        connections: IConnectionManager,
        history: IHistoryLoader,
        backend: IBackendClient,
        notifier: INotifier,
        agent_name: str = "system",
        reconnect_delay: float | None = None,
        on_message_sent: SentCallback | None = None,
    ):
        self._connections = connections
        self._history = history
        self._notifier = notifier
        self._reconnect_delay = reconnect_delay
        self._on_message_sent = on_message_sent

        self._timeline = ConversationTimeline()
        self._dispatcher = OutboundDispatcher(backend, self.refresh, agent_name)
        self._channel: LiveChannel | None = None
        self._history_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()  # open/close
        self._draft = ""

    @property
    def conversation_id(self) -> str | None:
        return self._timeline.conversation_id

    @property
    def timeline(self) -> ConversationTimeline:
        return self._timeline

    @property
    def channel(self) -> LiveChannel | None:
        return self._channel

    @property
    def connection_state(self) -> ConnectionState:
        if self._channel is None:
            return ConnectionState.CLOSED
        return self._channel.state

    @property
    def draft(self) -> str:
        return self._draft

    def set_draft(self, text: str) -> None:
        self._draft = text

    @property
    def is_sending(self) -> bool:
        cid = self.conversation_id
        return cid is not None and self._dispatcher.is_sending(cid)

    async def open(self, conversation_id: str) -> None:
        """Show a conversation: load history and open its live channel."""
        if not conversation_id:
            raise NotFoundError("No conversation id provided")

        async with self._lock:
            await self._close()
            logger.info("Opening conversation %s", conversation_id)

            self._timeline.reset(conversation_id)
            token = self._timeline.begin_load(conversation_id)
            self._history_task = asyncio.create_task(
                self._load_history(conversation_id, token),
                name=f"history:{conversation_id}",
            )

            channel = await self._connections.open(
                conversation_id, reconnect_delay=self._reconnect_delay
            )
            channel.on_message(partial(self._on_frame, conversation_id))
            self._channel = channel

    async def close(self) -> None:
        """Cancel pending work, close the live channel, forget the timeline."""
        async with self._lock:
            await self._close()

    async def _close(self) -> None:
        task, self._history_task = self._history_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        channel, self._channel = self._channel, None
        if channel is not None:
            await self._connections.close(channel)

        if self._timeline.conversation_id is not None:
            logger.info("Closed conversation %s", self._timeline.conversation_id)
        self._timeline.clear()
        self._draft = ""

    async def wait_loaded(self) -> None:
        """Wait for the initial history load, if one is pending."""
        task = self._history_task
        if task is not None:
            await asyncio.shield(task)

    async def refresh(self, conversation_id: str | None = None) -> None:
        """Re-read history for the open conversation."""
        cid = conversation_id or self.conversation_id
        if cid is None or cid != self.conversation_id:
            return

        token = self._timeline.begin_load(cid)
        await self._load_history(cid, token)

    async def send(self, text: str | None = None) -> bool:
        """Send text (or the current draft). Returns True on success.

        On any failure the draft is kept for a manual retry and the
        operator gets an error notification.
        """
        if text is not None:
            self._draft = text

        cid = self.conversation_id
        try:
            await self._dispatcher.send(cid, self._draft)
        except ValidationError as e:
            logger.warning("Cannot send message: %s", e)
            self._notifier.error(str(e))
            return False
        except BackendRejection as e:
            self._notifier.error(SEND_FAILED_TEXT)
            logger.error("Send rejected for %s: %s", cid, e.payload)
            return False
        except (TransportError, ProtocolError) as e:
            self._notifier.error(SEND_FAILED_TEXT)
            logger.error("Failed to send message for %s: %s", cid, e)
            return False

        if self.conversation_id == cid:
            self._draft = ""

        if self._on_message_sent is not None:
            await self._on_message_sent(cid)
        return True

    def snapshot(self) -> dict:
        """Render-ready state of the view."""
        messages = self._timeline.messages
        empty = self._timeline.is_loaded and not messages

        return {
            "conversation_id": self.conversation_id,
            "connection_state": self.connection_state.value,
            "loading": self._timeline.is_loading,
            "sending": self.is_sending,
            "draft": self._draft,
            "messages": [
                {**msg.to_dict(), "is_agent_side": msg.is_agent_side}
                for msg in messages
            ],
            "empty_text": EMPTY_HISTORY_TEXT if empty else None,
        }

    async def _load_history(self, conversation_id: str, token: int) -> None:
        history = await self._history.load(conversation_id)
        applied = self._timeline.apply_history(conversation_id, token, history)
        if applied:
            logger.debug(
                "History applied for %s (%d messages)", conversation_id, len(history)
            )

    async def _on_frame(self, conversation_id: str, frame: Frame) -> None:
        if isinstance(frame, ChatFrame):
            self._timeline.append_live(conversation_id, frame.message)
        else:
            logger.debug("Ignoring broadcast frame on conversation %s", conversation_id)
