"""Escalation module: issue list and escalation feed."""

from .issues import IssueList, IssueService, tickets_from_escalated
from .listener import (
    NEW_ESCALATION_TEXT,
    EscalationListener,
    IEscalationListener,
    new_session_id,
)

__all__ = [
    "IssueList",
    "IssueService",
    "tickets_from_escalated",
    "EscalationListener",
    "IEscalationListener",
    "NEW_ESCALATION_TEXT",
    "new_session_id",
]
