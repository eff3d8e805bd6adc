"""Helpdesk live conversation synchronization core."""

from .app import Application, IApplication
from .backend import BackendClient, IBackendClient
from .config import Settings
from .connection import ConnectionManager, IConnectionManager, LiveChannel
from .conversation import (
    ConversationTimeline,
    ConversationView,
    HistoryLoader,
    IHistoryLoader,
    IOutboundDispatcher,
    OutboundDispatcher,
    merge,
)
from .errors import (
    BackendRejection,
    HelpdeskError,
    NotFoundError,
    ProtocolError,
    SendInProgressError,
    TransportError,
    ValidationError,
)
from .escalation import EscalationListener, IEscalationListener, IssueList, IssueService
from .models import (
    ChatFrame,
    ConnectionState,
    EscalationFrame,
    IssueFilter,
    IssueStatus,
    Message,
    Notification,
    TicketSummary,
)
from .notifications import INotifier, Notifier
from .storage import IKeyValueStore, KeyValueStore

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "Message",
    "ConnectionState",
    "ChatFrame",
    "EscalationFrame",
    "TicketSummary",
    "IssueStatus",
    "IssueFilter",
    "Notification",
    # Errors
    "HelpdeskError",
    "TransportError",
    "ProtocolError",
    "ValidationError",
    "NotFoundError",
    "SendInProgressError",
    "BackendRejection",
    # Components
    "IBackendClient",
    "BackendClient",
    "IConnectionManager",
    "ConnectionManager",
    "LiveChannel",
    "IHistoryLoader",
    "HistoryLoader",
    "ConversationTimeline",
    "merge",
    "IOutboundDispatcher",
    "OutboundDispatcher",
    "ConversationView",
    "IssueList",
    "IssueService",
    "IEscalationListener",
    "EscalationListener",
    "INotifier",
    "Notifier",
    "IKeyValueStore",
    "KeyValueStore",
]
