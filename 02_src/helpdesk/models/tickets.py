"""Ticket summary models and backend record mapping."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class IssueStatus(str, Enum):
    """Ticket status as shown in the issue list."""

    NEW = "new"
    ESCALATED = "escalated"
    CLOSED = "closed"
    AI = "ai"


class IssueFilter(str, Enum):
    """Issue list filter tabs."""

    ALL = "all"
    PENDING = "pending"
    ESCALATED = "escalated"
    ACTIVE = "active"


ACTIVE_STATUSES = frozenset({IssueStatus.NEW, IssueStatus.AI, IssueStatus.ESCALATED})


@dataclass
class TicketSummary:
    """Read-only local view of a backend ticket."""

    id: str
    title: str
    description: str
    requester_label: str
    status: IssueStatus
    priority: str
    created_at: datetime
    updated_at: datetime
    conversation_id: str
    category: str = "General Support"

    def matches(self, query: str) -> bool:
        """Case-insensitive search over title, description and requester."""
        needle = query.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or needle in self.requester_label.lower()
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "requester_label": self.requester_label,
            "status": self.status.value,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "conversation_id": self.conversation_id,
            "category": self.category,
        }


def _parse_created_at(value) -> datetime:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return datetime.now(timezone.utc)


def _text(record: dict, key: str) -> str | None:
    """Field as a string, or None when missing or blank."""
    value = record.get(key)
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def ticket_from_record(record: dict, status: IssueStatus) -> TicketSummary:
    """Build a TicketSummary from a partial backend record.

    Missing fields get explicit placeholders instead of failing, so a ticket
    with incomplete backend data still shows up in the list. Non-string
    values are stringified.
    """
    created_at = _parse_created_at(record.get("created_at"))
    session_id = _text(record, "session_id")

    return TicketSummary(
        id=(
            _text(record, "jira_issue_id")
            or session_id
            or f"temp-{uuid.uuid4().hex}"
        ),
        title=_text(record, "summary") or "No Summary Provided",
        description=_text(record, "description") or "No description available.",
        requester_label=_text(record, "user_name") or "Unknown User",
        status=status,
        priority=_text(record, "priority") or "medium",
        created_at=created_at,
        updated_at=created_at,
        conversation_id=session_id or f"unknown-user-{uuid.uuid4().hex}",
        category=_text(record, "category") or "General Support",
    )
