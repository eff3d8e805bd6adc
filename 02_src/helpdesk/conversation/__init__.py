"""Conversation module: history, reconciliation, sending."""

from .dispatcher import IOutboundDispatcher, OutboundDispatcher
from .history import HistoryLoader, IHistoryLoader
from .timeline import ConversationTimeline, merge
from .view import EMPTY_HISTORY_TEXT, ConversationView

__all__ = [
    "HistoryLoader",
    "IHistoryLoader",
    "ConversationTimeline",
    "merge",
    "OutboundDispatcher",
    "IOutboundDispatcher",
    "ConversationView",
    "EMPTY_HISTORY_TEXT",
]
