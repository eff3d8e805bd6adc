"""Escalation Listener: session-wide feed of newly escalated tickets."""

import time
from typing import Protocol

from ..connection import IConnectionManager, LiveChannel
from ..logging_config import get_logger
from ..models import EscalationFrame, Frame, IssueStatus, TicketSummary, ticket_from_record
from ..notifications import INotifier
from .issues import IssueList

logger = get_logger(__name__)

NEW_ESCALATION_TEXT = "New escalated ticket received!"


def new_session_id() -> str:
    """Dashboard session id, generated once per session start."""
    return f"agent-frontend-{int(time.time() * 1000)}"


class IEscalationListener(Protocol):
    """Long-lived subscription to escalation broadcasts."""

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class EscalationListener:
    """Inserts escalated tickets at the head of the issue list."""

    def __init__(
        self,
        connections: IConnectionManager,
        issues: IssueList,
        notifier: INotifier,
        reconnect_delay: float | None = None,
    ):
        self._connections = connections
        self._issues = issues
        self._notifier = notifier
        self._reconnect_delay = reconnect_delay
        self._channel: LiveChannel | None = None
        self._session_id: str | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def channel(self) -> LiveChannel | None:
        return self._channel

    async def start(self) -> None:
        """Open the session channel."""
        if self._channel is not None:
            return

        self._session_id = new_session_id()
        self._channel = await self._connections.open(
            self._session_id, reconnect_delay=self._reconnect_delay
        )
        self._channel.on_message(self._on_frame)
        logger.info("Escalation listener started as %s", self._session_id)

    async def stop(self) -> None:
        """Close the session channel."""
        channel, self._channel = self._channel, None
        if channel is not None:
            await self._connections.close(channel)
            logger.info("Escalation listener stopped")

    def handle_escalation(self, record: dict) -> TicketSummary | None:
        """Add an escalated ticket. Returns it, or None if already listed."""
        ticket = ticket_from_record(record, IssueStatus.ESCALATED)

        if not self._issues.prepend(ticket):
            logger.debug("Escalation %s already listed", ticket.id)
            return None

        logger.info("New ticket escalated: %s", ticket.id)
        self._notifier.success(NEW_ESCALATION_TEXT)
        return ticket

    async def _on_frame(self, frame: Frame) -> None:
        if isinstance(frame, EscalationFrame):
            self.handle_escalation(frame.ticket)
