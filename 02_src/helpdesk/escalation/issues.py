"""Issue list state and the ordinary list refresh."""

import asyncio

from ..backend import IBackendClient
from ..errors import ProtocolError, TransportError
from ..logging_config import get_logger
from ..models import (
    ACTIVE_STATUSES,
    IssueFilter,
    IssueStatus,
    TicketSummary,
    ticket_from_record,
)

logger = get_logger(__name__)


class IssueList:
    """Most-recent-first list of tickets shown in the support queue.

    Two writers: the escalation listener prepends, the list refresh
    replaces. Escalations prepended after begin_refresh() survive the
    replacement that follows it.
    """

    def __init__(self):
        self._issues: list[TicketSummary] = []
        self._arrivals: list[TicketSummary] = []  # prepends a live marker may need
        self._arrival_count = 0
        self._markers: list[int] = []

    def __len__(self) -> int:
        return len(self._issues)

    def __contains__(self, issue_id: str) -> bool:
        return self.get(issue_id) is not None

    def snapshot(self) -> list[TicketSummary]:
        return self._issues.copy()

    def get(self, issue_id: str) -> TicketSummary | None:
        for issue in self._issues:
            if issue.id == issue_id:
                return issue
        return None

    @property
    def pending_arrivals(self) -> int:
        return len(self._arrivals)

    def prepend(self, ticket: TicketSummary) -> bool:
        """Insert at the head unless the id is already listed."""
        if ticket.id in self:
            return False

        self._issues.insert(0, ticket)
        self._arrival_count += 1
        if self._markers:
            self._arrivals.append(ticket)
        return True

    def begin_refresh(self) -> int:
        """Marker for replace(): escalations after it are carried over."""
        marker = self._arrival_count
        self._markers.append(marker)
        return marker

    def end_refresh(self, marker: int) -> None:
        """Release a marker whose refresh will not call replace()."""
        if marker in self._markers:
            self._markers.remove(marker)
        self._trim()

    def replace(self, tickets: list[TicketSummary], since: int | None = None) -> None:
        """Swap in a freshly fetched list."""
        fresh = list(tickets)

        if since is not None:
            # _arrivals holds the last len(_arrivals) prepends
            offset = self._arrival_count - len(self._arrivals)
            recent = self._arrivals[max(since - offset, 0):]
            known = {t.id for t in fresh}
            carried = [t for t in reversed(recent) if t.id not in known]
            fresh = carried + fresh

        self._issues = fresh
        if since is not None:
            self.end_refresh(since)

    def _trim(self) -> None:
        if not self._markers:
            self._arrivals = []
            return
        offset = self._arrival_count - len(self._arrivals)
        self._arrivals = self._arrivals[max(min(self._markers) - offset, 0):]

    def filter(
        self,
        query: str = "",
        issue_filter: IssueFilter = IssueFilter.ALL,
    ) -> list[TicketSummary]:
        """Search and tab filtering as in the support queue."""
        result = []
        for issue in self._issues:
            if query and not issue.matches(query):
                continue
            if issue_filter == IssueFilter.PENDING and issue.status != IssueStatus.NEW:
                continue
            if (
                issue_filter == IssueFilter.ESCALATED
                and issue.status != IssueStatus.ESCALATED
            ):
                continue
            if issue_filter == IssueFilter.ACTIVE and issue.status not in ACTIVE_STATUSES:
                continue
            result.append(issue)
        return result

    def counts(self) -> dict[str, int]:
        return {
            IssueFilter.ESCALATED.value: sum(
                1 for i in self._issues if i.status == IssueStatus.ESCALATED
            ),
            IssueFilter.ACTIVE.value: sum(
                1 for i in self._issues if i.status in ACTIVE_STATUSES
            ),
        }


def tickets_from_escalated(records: list) -> list[TicketSummary]:
    """Map GET /tickets/escalated rows, keeping only tracker-linked tickets."""
    tickets = []
    for record in records:
        if not isinstance(record, dict) or record.get("jira_issue_id") is None:
            continue
        status = (
            IssueStatus.ESCALATED
            if record.get("awaiting_human_response") is True
            else IssueStatus.AI
        )
        tickets.append(ticket_from_record(record, status))
    return tickets


class IssueService:
    """Owns the IssueList and its refresh from the backend."""

    def __init__(self, backend: IBackendClient, issues: IssueList | None = None):
        self._backend = backend
        self._issues = issues if issues is not None else IssueList()
        self._lock = asyncio.Lock()

    @property
    def issues(self) -> IssueList:
        return self._issues

    async def refresh(self) -> bool:
        """Re-fetch the escalated tickets. Returns False if the fetch failed."""
        async with self._lock:
            marker = self._issues.begin_refresh()
            try:
                records = await self._backend.fetch_escalated()
            except (TransportError, ProtocolError) as e:
                logger.error("Error fetching issues: %s", e)
                self._issues.end_refresh(marker)
                return False

            if not isinstance(records, list):
                logger.error("Expected list of tickets, got: %s", str(records)[:100])
                self._issues.replace([], since=marker)
                return True

            tickets = tickets_from_escalated(records)
            self._issues.replace(tickets, since=marker)
            logger.info("Issue list refreshed (%d tickets)", len(tickets))
            return True

    async def on_message_sent(self, conversation_id: str) -> None:
        """Replies change ticket state on the backend; re-read the list."""
        await self.refresh()
