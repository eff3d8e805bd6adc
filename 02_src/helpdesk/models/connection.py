"""Live channel state model."""

from enum import Enum


class ConnectionState(str, Enum):
    """Lifecycle of a live channel."""

    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"
