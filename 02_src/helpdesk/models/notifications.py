"""Operator notification model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationLevel(str, Enum):
    """Toast style."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass
class Notification:
    """A non-blocking toast shown to the operator."""

    level: NotificationLevel
    text: str
    created_at: datetime
