"""Connection Manager module."""

from .manager import (
    ConnectFactory,
    ConnectionManager,
    FrameHandler,
    IConnectionManager,
    LiveChannel,
)

__all__ = [
    "ConnectionManager",
    "IConnectionManager",
    "LiveChannel",
    "FrameHandler",
    "ConnectFactory",
]
