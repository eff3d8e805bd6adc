"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


_DROP = object()


class FakeSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, url: str):
        self.url = url
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()

    def feed(self, raw) -> None:
        """Deliver a raw frame (str, bytes, or dict encoded as JSON)."""
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        self._queue.put_nowait(raw)

    def drop(self) -> None:
        """Simulate the server closing the connection."""
        self._queue.put_nowait(_DROP)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._queue.get()
        if item is _DROP:
            raise StopAsyncIteration
        return item


class FakeConnector:
    """Connect factory recording every handshake attempt."""

    def __init__(self):
        self.sockets: list[FakeSocket] = []
        self.fail_next = 0

    @property
    def attempts(self) -> int:
        return len(self.sockets)

    def __call__(self, url: str) -> FakeSocket:
        socket = FakeSocket(url)
        self.sockets.append(socket)
        if self.fail_next:
            self.fail_next -= 1
            raise OSError("connection refused")
        return socket

    def for_key(self, key: str) -> list[FakeSocket]:
        return [s for s in self.sockets if f"session_id={key}" in s.url]

    def latest(self, key: str) -> FakeSocket:
        return self.for_key(key)[-1]


class FakeBackend:
    """Programmable REST backend served through httpx.MockTransport."""

    def __init__(self):
        self.histories: dict[str, object] = {}
        self.escalated: object = []
        self.reply_status = "success"
        self.fail_paths: set[str] = set()
        self.history_gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []
        self.replies: list[dict] = []

    def count(self, method: str, prefix: str) -> int:
        return sum(
            1
            for r in self.requests
            if r.method == method and r.url.path.startswith(prefix)
        )

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.fail_paths:
            raise httpx.ConnectError("backend unavailable", request=request)

        if request.method == "GET" and path.startswith("/chat/history/"):
            conversation_id = path[len("/chat/history/"):]
            gate = self.history_gates.get(conversation_id)
            if gate is not None:
                await gate.wait()
            body = self.histories.get(conversation_id, {"messages": []})
            return httpx.Response(200, json=body)

        if request.method == "POST" and path == "/tickets/reply":
            self.replies.append(json.loads(request.content))
            return httpx.Response(200, json={"status": self.reply_status})

        if request.method == "GET" and path == "/tickets/escalated":
            return httpx.Response(200, json=self.escalated)

        return httpx.Response(404, json={"detail": "Not found"})


@pytest.fixture
def connector():
    """Fake WebSocket connect factory."""
    return FakeConnector()


@pytest.fixture
def fake_backend():
    """Fake REST backend state."""
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(fake_backend):
    """httpx client routed to the fake backend."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_backend.handler))
    yield client
    await client.aclose()


@pytest.fixture
def backend(http_client):
    """BackendClient over the fake backend."""
    from helpdesk.backend import BackendClient

    return BackendClient("http://backend.test", client=http_client)


@pytest_asyncio.fixture
async def connections(connector):
    """ConnectionManager with fast reconnects."""
    from helpdesk.connection import ConnectionManager

    manager = ConnectionManager(
        "ws://backend.test", reconnect_delay=0.02, connect=connector
    )
    yield manager
    await manager.close_all()


@pytest.fixture
def notifier():
    """Create in-memory notifier."""
    from helpdesk.notifications import Notifier

    return Notifier()


@pytest_asyncio.fixture
async def storage():
    """Create in-memory key-value store for testing."""
    from helpdesk.storage import KeyValueStore

    st = KeyValueStore(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def settings():
    """Settings pointing at the fake backend with fast reconnects."""
    from helpdesk.config import Settings

    return Settings(
        backend_url="http://backend.test",
        live_url="ws://backend.test",
        conversation_reconnect_delay=0.02,
        escalation_reconnect_delay=0.02,
        db_path=":memory:",
    )


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    async def _wait(predicate, timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return _wait
