"""Decoded live channel frames."""

from dataclasses import dataclass
from typing import Union

from .messages import Message

KEEPALIVE = "ping"
ESCALATION_TYPE = "ticket_escalated"


@dataclass
class ChatFrame:
    """A direct chat message for the conversation the channel is keyed by."""

    message: Message


@dataclass
class EscalationFrame:
    """A broadcast announcing a newly escalated ticket (partial record)."""

    ticket: dict


Frame = Union[ChatFrame, EscalationFrame]
