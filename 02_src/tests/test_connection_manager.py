"""Tests for ConnectionManager and LiveChannel."""

import asyncio

import pytest

from helpdesk.config import MIN_RECONNECT_DELAY
from helpdesk.connection import ConnectionManager
from helpdesk.models import ChatFrame, ConnectionState, EscalationFrame


CHAT = {"agent_name": "AI", "message": "Hello", "timestamp": "2024-01-01T00:00:00Z"}


class TestConnectionManagerOpen:
    """Tests for opening channels."""

    @pytest.mark.asyncio
    async def test_open_connects_to_keyed_url(self, connections, connector, wait_until):
        """Test that a channel connects to /ws/admin keyed by session id."""
        channel = await connections.open("s1")

        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        assert connector.attempts == 1
        assert connector.sockets[0].url == "ws://backend.test/ws/admin?session_id=s1"

    @pytest.mark.asyncio
    async def test_reopen_same_key_closes_previous(
        self, connections, connector, wait_until
    ):
        """Test that opening an id twice does not leak the first channel."""
        first = await connections.open("s1")
        await wait_until(lambda: first.state == ConnectionState.OPEN)

        second = await connections.open("s1")
        await wait_until(lambda: second.state == ConnectionState.OPEN)

        assert first.state == ConnectionState.CLOSED
        assert connector.sockets[0].closed
        assert connections.get("s1") is second
        assert connections.keys == ["s1"]

    @pytest.mark.asyncio
    async def test_reconnect_delay_is_clamped(self, connector):
        """Test that sub-minimum reconnect delays are raised to the floor."""
        manager = ConnectionManager("ws://backend.test", reconnect_delay=0.0, connect=connector)
        channel = await manager.open("s1")

        assert channel.reconnect_delay == MIN_RECONNECT_DELAY

        await manager.close_all()


class TestLiveChannelFrames:
    """Tests for inbound frame handling."""

    @pytest.mark.asyncio
    async def test_chat_frame_reaches_handler(self, connections, connector, wait_until):
        """Test that decoded frames are delivered to handlers."""
        received = []

        async def handler(frame):
            received.append(frame)

        channel = await connections.open("s1")
        channel.on_message(handler)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        connector.latest("s1").feed(CHAT)
        await wait_until(lambda: len(received) == 1)

        assert isinstance(received[0], ChatFrame)
        assert received[0].message.content == "Hello"

    @pytest.mark.asyncio
    async def test_escalation_frame_reaches_handler(
        self, connections, connector, wait_until
    ):
        """Test that broadcast frames are delivered as EscalationFrame."""
        received = []

        async def handler(frame):
            received.append(frame)

        channel = await connections.open("agent-frontend-1")
        channel.on_message(handler)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        connector.latest("agent-frontend-1").feed(
            {"type": "ticket_escalated", "ticket": {"jira_issue_id": "JIRA-5"}}
        )
        await wait_until(lambda: len(received) == 1)

        assert isinstance(received[0], EscalationFrame)

    @pytest.mark.asyncio
    async def test_keepalive_has_no_effect(self, connections, connector, wait_until):
        """Test that ping frames produce no callback and no state change."""
        received = []
        states = []

        async def handler(frame):
            received.append(frame)

        channel = await connections.open("s1")
        channel.on_message(handler)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)
        channel.on_state_change(states.append)

        socket = connector.latest("s1")
        socket.feed("ping")
        socket.feed(CHAT)
        await wait_until(lambda: len(received) == 1)

        assert states == []
        assert isinstance(received[0], ChatFrame)

    @pytest.mark.asyncio
    async def test_malformed_frame_is_dropped(self, connections, connector, wait_until):
        """Test that a bad frame is dropped and the channel keeps working."""
        received = []

        async def handler(frame):
            received.append(frame)

        channel = await connections.open("s1")
        channel.on_message(handler)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        socket = connector.latest("s1")
        socket.feed("{not json")
        socket.feed(CHAT)
        await wait_until(lambda: len(received) == 1)

        assert channel.state == ConnectionState.OPEN
        assert connector.attempts == 1

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_channel(
        self, connections, connector, wait_until
    ):
        """Test that errors in one handler don't affect others."""
        calls = []

        async def failing_handler(frame):
            calls.append("failing")
            raise RuntimeError("Test error")

        async def normal_handler(frame):
            calls.append("normal")

        channel = await connections.open("s1")
        channel.on_message(failing_handler)
        channel.on_message(normal_handler)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        socket = connector.latest("s1")
        socket.feed(CHAT)
        socket.feed(CHAT)
        await wait_until(lambda: calls.count("normal") == 2)

        assert calls.count("failing") == 2
        assert channel.state == ConnectionState.OPEN


class TestLiveChannelReconnect:
    """Tests for the reconnect loop."""

    @pytest.mark.asyncio
    async def test_reconnects_after_server_close(
        self, connections, connector, wait_until
    ):
        """Test that an unsolicited close schedules a reconnect."""
        states = []
        channel = await connections.open("s1")
        channel.on_state_change(states.append)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        connector.latest("s1").drop()
        await wait_until(lambda: connector.attempts == 2)
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        assert ConnectionState.RECONNECTING in states
        assert states[-1] == ConnectionState.OPEN

    @pytest.mark.asyncio
    async def test_retries_failed_handshakes(self, connections, connector, wait_until):
        """Test that connect failures keep retrying until one succeeds."""
        connector.fail_next = 3

        channel = await connections.open("s1")
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        assert connector.attempts == 4
        assert channel.connect_attempts == 4

    @pytest.mark.asyncio
    async def test_retries_after_unexpected_error(self, connector, wait_until):
        """Test that a non-transport failure still leads to a retry."""
        calls = []

        def flaky_connect(url):
            calls.append(url)
            if len(calls) == 1:
                raise RuntimeError("handshake blew up")
            return connector(url)

        manager = ConnectionManager("ws://test", reconnect_delay=0.02, connect=flaky_connect)
        channel = await manager.open("s1")

        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        assert channel.connect_attempts == 2
        await manager.close_all()

    @pytest.mark.asyncio
    async def test_close_cancels_pending_reconnect(
        self, connections, connector, wait_until
    ):
        """Test that a caller close suppresses all further reconnects."""
        channel = await connections.open("s1")
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        connector.latest("s1").drop()
        await wait_until(lambda: channel.state == ConnectionState.RECONNECTING)

        await connections.close(channel)
        await asyncio.sleep(channel.reconnect_delay * 5)

        assert connector.attempts == 1
        assert channel.state == ConnectionState.CLOSED
        assert connections.get("s1") is None

    @pytest.mark.asyncio
    async def test_close_open_channel(self, connections, connector, wait_until):
        """Test that closing an open channel closes the socket for good."""
        channel = await connections.open("s1")
        await wait_until(lambda: channel.state == ConnectionState.OPEN)

        await connections.close(channel)
        await asyncio.sleep(channel.reconnect_delay * 5)

        assert connector.sockets[0].closed
        assert connector.attempts == 1
        assert channel.is_closed

    @pytest.mark.asyncio
    async def test_close_before_connect(self, connections, connector):
        """Test closing a channel whose loop has not run yet."""
        channel = await connections.open("s1")
        await connections.close(channel)
        await asyncio.sleep(0.05)

        assert connector.attempts == 0
        assert channel.is_closed
