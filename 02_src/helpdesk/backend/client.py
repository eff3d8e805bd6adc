"""HTTP client for the helpdesk REST backend."""

from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ..errors import ProtocolError, TransportError
from ..logging_config import get_logger

logger = get_logger(__name__)


class IBackendClient(Protocol):
    """The three REST calls the synchronization core depends on."""

    async def fetch_history(self, conversation_id: str) -> dict:
        """GET /chat/history/{conversation_id}."""
        ...

    async def post_reply(
        self, conversation_id: str, message: str, agent_name: str
    ) -> dict:
        """POST /tickets/reply."""
        ...

    async def fetch_escalated(self) -> Any:
        """GET /tickets/escalated (expected to be a list)."""
        ...


class BackendClient:
    """httpx-based backend client."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        """Close the underlying client if we created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_history(self, conversation_id: str) -> dict:
        """GET /chat/history/{conversation_id}."""
        data = await self._request(
            "GET", f"/chat/history/{quote(conversation_id, safe='')}"
        )
        if not isinstance(data, dict):
            raise ProtocolError("History response must be an object")
        return data

    async def post_reply(
        self, conversation_id: str, message: str, agent_name: str
    ) -> dict:
        """POST /tickets/reply."""
        data = await self._request(
            "POST",
            "/tickets/reply",
            json={
                "session_id": conversation_id,
                "message": message,
                "agent_name": agent_name,
            },
        )
        if not isinstance(data, dict):
            raise ProtocolError("Reply response must be an object")
        return data

    async def fetch_escalated(self) -> Any:
        """GET /tickets/escalated."""
        return await self._request("GET", "/tickets/escalated")

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method} {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(f"{method} {path} returned invalid JSON") from e
