"""Open conversation API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...errors import NotFoundError


class OpenRequest(BaseModel):
    """Request model for opening a conversation."""

    conversation_id: str


class DraftRequest(BaseModel):
    """Request model for the operator's input box."""

    text: str


class SendRequest(BaseModel):
    """Request model for sending; falls back to the draft."""

    text: str | None = None


class MessageResponse(BaseModel):
    """Response model for one timeline entry."""

    agent_name: str
    message: str
    timestamp: str
    is_agent_side: bool
    id: str | None = None


class ConversationResponse(BaseModel):
    """Response model for the open conversation."""

    conversation_id: str | None
    connection_state: str
    loading: bool
    sending: bool
    draft: str
    messages: list[MessageResponse]
    empty_text: str | None = None


class SendResponse(BaseModel):
    """Response model for a send attempt."""

    status: str
    draft: str


def create_conversation_router(app: Application) -> APIRouter:
    """Create conversation router."""
    router = APIRouter(prefix="/api/conversation", tags=["conversation"])

    @router.get("", response_model=ConversationResponse)
    async def get_conversation() -> dict:
        """Current timeline and view state."""
        return app.conversation.snapshot()

    @router.post("/open", response_model=ConversationResponse)
    async def open_conversation(request: OpenRequest) -> dict:
        """Open a conversation, replacing the current one."""
        try:
            await app.conversation.open(request.conversation_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return app.conversation.snapshot()

    @router.put("/draft", response_model=ConversationResponse)
    async def set_draft(request: DraftRequest) -> dict:
        """Update the operator's input box."""
        app.conversation.set_draft(request.text)
        return app.conversation.snapshot()

    @router.post("/send", response_model=SendResponse)
    async def send_message(request: SendRequest) -> dict:
        """Send a reply; the draft is kept when sending fails."""
        if app.conversation.is_sending:
            raise HTTPException(status_code=409, detail="Send already in progress")
        ok = await app.conversation.send(request.text)
        return {
            "status": "success" if ok else "failed",
            "draft": app.conversation.draft,
        }

    @router.post("/refresh", response_model=ConversationResponse)
    async def refresh_conversation() -> dict:
        """Re-read history for the open conversation."""
        if app.conversation.conversation_id is None:
            raise HTTPException(status_code=404, detail="No conversation open")
        await app.conversation.refresh()
        return app.conversation.snapshot()

    @router.delete("", response_model=ConversationResponse)
    async def close_conversation() -> dict:
        """Close the open conversation."""
        await app.conversation.close()
        return app.conversation.snapshot()

    return router
