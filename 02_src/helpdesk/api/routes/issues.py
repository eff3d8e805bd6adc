"""Issue list API routes."""

from datetime import datetime

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application
from ...models import IssueFilter


class IssueResponse(BaseModel):
    """Response model for one ticket summary."""

    id: str
    title: str
    description: str
    requester_label: str
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime
    conversation_id: str
    category: str


class RefreshResponse(BaseModel):
    """Response model for a list refresh."""

    status: str
    count: int


def create_issues_router(app: Application) -> APIRouter:
    """Create issues router."""
    router = APIRouter(prefix="/api/issues", tags=["issues"])

    @router.get("", response_model=list[IssueResponse])
    async def list_issues(
        query: str = Query("", description="Search title, description, requester"),
        filter: IssueFilter = Query(IssueFilter.ALL, description="Status tab"),
    ) -> list[dict]:
        """List issues, most recent escalation first."""
        return [issue.to_dict() for issue in app.issues.issues.filter(query, filter)]

    @router.get("/counts", response_model=dict[str, int])
    async def issue_counts() -> dict:
        """Badge counts for the status tabs."""
        return app.issues.issues.counts()

    @router.post("/refresh", response_model=RefreshResponse)
    async def refresh_issues() -> dict:
        """Re-fetch escalated tickets from the backend."""
        ok = await app.issues.refresh()
        if not ok:
            raise HTTPException(status_code=502, detail="Error fetching issues")
        return {"status": "ok", "count": len(app.issues.issues)}

    return router
