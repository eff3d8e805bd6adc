"""Core data models for the helpdesk core."""

from .connection import ConnectionState
from .frames import ESCALATION_TYPE, KEEPALIVE, ChatFrame, EscalationFrame, Frame
from .messages import AGENT_SIDE_LABELS, Message
from .notifications import Notification, NotificationLevel
from .tickets import (
    ACTIVE_STATUSES,
    IssueFilter,
    IssueStatus,
    TicketSummary,
    ticket_from_record,
)

__all__ = [
    # Messages
    "Message",
    "AGENT_SIDE_LABELS",
    # Connection
    "ConnectionState",
    # Frames
    "ChatFrame",
    "EscalationFrame",
    "Frame",
    "KEEPALIVE",
    "ESCALATION_TYPE",
    # Tickets
    "TicketSummary",
    "IssueStatus",
    "IssueFilter",
    "ACTIVE_STATUSES",
    "ticket_from_record",
    # Notifications
    "Notification",
    "NotificationLevel",
]
