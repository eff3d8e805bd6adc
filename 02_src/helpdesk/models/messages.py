"""Conversation message models."""

from dataclasses import dataclass
from datetime import datetime

AGENT_SIDE_LABELS = frozenset({"AI", "system", "System"})


@dataclass
class Message:
    """A single message in a conversation timeline."""

    sender_label: str  # free-form: "User", "system", "AI", ...
    content: str
    timestamp: datetime
    id: str | None = None  # only when the backend supplies one

    @property
    def is_agent_side(self) -> bool:
        """True for messages rendered on the operator/agent side."""
        return self.sender_label in AGENT_SIDE_LABELS

    def to_dict(self) -> dict:
        data = {
            "agent_name": self.sender_label,
            "message": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.id is not None:
            data["id"] = self.id
        return data
