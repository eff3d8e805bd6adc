"""Tests for the operator HTTP API."""

import httpx
import pytest
import pytest_asyncio

from helpdesk.api import create_fastapi_app
from helpdesk.app import Application


@pytest_asyncio.fixture
async def application(settings, connector, http_client, fake_backend):
    """Started application over fakes."""
    fake_backend.escalated = [
        {"jira_issue_id": "J-1", "session_id": "s1", "summary": "Crash",
         "awaiting_human_response": True},
        {"jira_issue_id": "J-2", "session_id": "s2", "summary": "Refund",
         "awaiting_human_response": False},
    ]
    app = Application(settings, connect=connector, http_client=http_client)
    await app.start()
    yield app
    await app.stop()


@pytest_asyncio.fixture
async def client(application):
    """HTTP client for the FastAPI app (lifespan handled by the fixture above)."""
    fastapi_app = create_fastapi_app(application)
    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://api.test") as c:
        yield c


class TestIssuesRoutes:
    """Tests for /api/issues."""

    @pytest.mark.asyncio
    async def test_list_issues(self, client):
        """Test listing all issues."""
        response = await client.get("/api/issues")

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == ["J-1", "J-2"]

    @pytest.mark.asyncio
    async def test_filter_and_search(self, client):
        """Test tab filter and search query."""
        escalated = await client.get("/api/issues", params={"filter": "escalated"})
        assert [i["id"] for i in escalated.json()] == ["J-1"]

        search = await client.get("/api/issues", params={"query": "refund"})
        assert [i["id"] for i in search.json()] == ["J-2"]

    @pytest.mark.asyncio
    async def test_counts(self, client):
        """Test badge counts."""
        response = await client.get("/api/issues/counts")
        assert response.json() == {"escalated": 1, "active": 2}

    @pytest.mark.asyncio
    async def test_refresh_failure(self, client, fake_backend):
        """Test that a failed refresh is reported as a bad gateway."""
        fake_backend.fail_paths.add("/tickets/escalated")

        response = await client.post("/api/issues/refresh")

        assert response.status_code == 502


class TestConversationRoutes:
    """Tests for /api/conversation."""

    @pytest.mark.asyncio
    async def test_open_and_read(self, client, application, fake_backend):
        """Test opening a conversation and reading its timeline."""
        fake_backend.histories["s1"] = {
            "messages": [{"agent_name": "User", "message": "It crashes"}]
        }

        response = await client.post(
            "/api/conversation/open", json={"conversation_id": "s1"}
        )
        assert response.status_code == 200
        await application.conversation.wait_loaded()

        body = (await client.get("/api/conversation")).json()
        assert body["conversation_id"] == "s1"
        assert body["messages"][0]["message"] == "It crashes"
        assert body["empty_text"] is None

    @pytest.mark.asyncio
    async def test_open_without_id(self, client):
        """Test that an empty id is a 404."""
        response = await client.post(
            "/api/conversation/open", json={"conversation_id": ""}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_send_failure_keeps_draft(self, client, application, fake_backend):
        """Test that the draft survives a rejected send."""
        fake_backend.reply_status = "error"
        await client.post("/api/conversation/open", json={"conversation_id": "s1"})
        await client.put("/api/conversation/draft", json={"text": "Try again later"})

        response = await client.post("/api/conversation/send", json={})

        assert response.json() == {"status": "failed", "draft": "Try again later"}

        notes = (await client.get("/api/notifications")).json()
        assert notes[-1]["level"] == "error"

    @pytest.mark.asyncio
    async def test_send_success(self, client, fake_backend):
        """Test a successful send clears the draft."""
        await client.post("/api/conversation/open", json={"conversation_id": "s1"})

        response = await client.post("/api/conversation/send", json={"text": "Fixed!"})

        assert response.json() == {"status": "success", "draft": ""}
        assert fake_backend.replies[-1]["message"] == "Fixed!"

    @pytest.mark.asyncio
    async def test_close(self, client):
        """Test closing the conversation."""
        await client.post("/api/conversation/open", json={"conversation_id": "s1"})

        body = (await client.delete("/api/conversation")).json()

        assert body["conversation_id"] is None
        assert body["connection_state"] == "closed"

    @pytest.mark.asyncio
    async def test_refresh_without_conversation(self, client):
        """Test refresh with nothing open."""
        response = await client.post("/api/conversation/refresh")
        assert response.status_code == 404


class TestNotificationRoutes:
    """Tests for /api/notifications."""

    @pytest.mark.asyncio
    async def test_drain(self, client, application):
        """Test draining notifications."""
        application.notifier.info("hello")

        first = await client.get("/api/notifications", params={"drain": True})
        second = await client.get("/api/notifications")

        assert [n["text"] for n in first.json()] == ["hello"]
        assert second.json() == []


class TestPreferenceRoutes:
    """Tests for /api/preferences."""

    @pytest.mark.asyncio
    async def test_round_trip(self, client):
        """Test storing, reading and deleting a value."""
        agents = [{"name": "Support Bot"}]

        put = await client.put("/api/preferences/agents", json={"value": agents})
        assert put.status_code == 200

        got = await client.get("/api/preferences/agents")
        assert got.json() == {"key": "agents", "value": agents}

        keys = await client.get("/api/preferences")
        assert keys.json() == ["agents"]

        deleted = await client.delete("/api/preferences/agents")
        assert deleted.status_code == 200

        missing = await client.get("/api/preferences/agents")
        assert missing.status_code == 404
