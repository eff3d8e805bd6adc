"""Live channel management over WebSockets."""

import asyncio
from typing import Any, Awaitable, Callable, Protocol
from urllib.parse import urlencode

import websockets
from websockets.exceptions import WebSocketException

from ..config import MIN_RECONNECT_DELAY
from ..errors import ProtocolError
from ..logging_config import get_logger
from ..models import ConnectionState, Frame
from ..protocol import decode_frame

logger = get_logger(__name__)


FrameHandler = Callable[[Frame], Awaitable[None]]
StateHandler = Callable[[ConnectionState], None]
# url -> async context manager yielding an async-iterable socket
ConnectFactory = Callable[[str], Any]

_TRANSPORT_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    WebSocketException,
)


class IConnectionManager(Protocol):
    """Owns one live channel per key."""

    async def open(
        self, key: str, reconnect_delay: float | None = None
    ) -> "LiveChannel":
        """Open (or re-open) the channel for key."""
        ...

    async def close(self, channel: "LiveChannel") -> None:
        """Close a channel; no reconnects follow."""
        ...


class LiveChannel:
    """A self-healing inbound channel keyed by conversation or session id."""

    def __init__(
        self,
        key: str,
        url: str,
        reconnect_delay: float,
        connect: ConnectFactory,
    ):
        self.key = key
        self.url = url
        self._reconnect_delay = max(reconnect_delay, MIN_RECONNECT_DELAY)
        self._connect = connect

        self._frame_handlers: list[FrameHandler] = []
        self._state_handlers: list[StateHandler] = []
        self._state = ConnectionState.CONNECTING
        self._closing = False
        self._task: asyncio.Task | None = None

        self.connect_attempts = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_delay(self) -> float:
        return self._reconnect_delay

    @property
    def is_closed(self) -> bool:
        return self._state == ConnectionState.CLOSED

    def on_message(self, handler: FrameHandler) -> None:
        """Register an async callback for decoded frames."""
        self._frame_handlers.append(handler)

    def on_state_change(self, handler: StateHandler) -> None:
        """Register a callback for ConnectionState transitions."""
        self._state_handlers.append(handler)

    def start(self) -> None:
        """Start the connect/reconnect loop."""
        if self._task is None and not self._closing:
            self._task = asyncio.create_task(
                self._run(), name=f"live-channel:{self.key}"
            )

    async def close(self) -> None:
        """Close deliberately and cancel any pending reconnect."""
        self._closing = True
        task, self._task = self._task, None

        if task is not None and not task.done():
            task.cancel()
            if task is not asyncio.current_task():
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._set_state(ConnectionState.CLOSED)

    async def _run(self) -> None:
        """Connect, pump frames, and retry after unsolicited closes."""
        while not self._closing:
            self._set_state(ConnectionState.CONNECTING)
            self.connect_attempts += 1

            try:
                async with self._connect(self.url) as socket:
                    self._set_state(ConnectionState.OPEN)
                    logger.info("Live channel %s connected", self.key)
                    async for raw in socket:
                        await self._handle_raw(raw)
                logger.warning("Live channel %s closed by server", self.key)
            except _TRANSPORT_ERRORS as e:
                logger.warning("Live channel %s dropped: %s", self.key, e)
            except Exception as e:
                logger.error(
                    "Unexpected error on live channel %s: %s",
                    self.key,
                    e,
                    exc_info=True,
                )

            if self._closing:
                break

            self._set_state(ConnectionState.RECONNECTING)
            logger.info(
                "Reconnecting live channel %s in %.2fs",
                self.key,
                self._reconnect_delay,
            )
            await asyncio.sleep(self._reconnect_delay)

    async def _handle_raw(self, raw: str | bytes) -> None:
        """Decode one frame and fan it out to handlers."""
        try:
            frame = decode_frame(raw)
        except ProtocolError as e:
            logger.error("Dropping malformed frame on %s: %s", self.key, e)
            return

        if frame is None:
            return

        handlers = list(self._frame_handlers)
        if not handlers:
            return

        results = await asyncio.gather(
            *[handler(frame) for handler in handlers],
            return_exceptions=True,
        )

        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error(
                    "Error in frame handler %s on %s: %s", i, self.key, result
                )

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return

        logger.debug("Live channel %s: %s -> %s", self.key, self._state.value, state.value)
        self._state = state

        for handler in list(self._state_handlers):
            try:
                handler(state)
            except Exception as e:
                logger.error("Error in state handler on %s: %s", self.key, e)


class ConnectionManager:
    """Keeps at most one LiveChannel per key."""

    def __init__(
        self,
        live_url: str = "ws://localhost:8000",
        reconnect_delay: float = 5.0,
        connect: ConnectFactory | None = None,
    ):
        self._live_url = live_url.rstrip("/")
        self._reconnect_delay = reconnect_delay
        self._connect = connect or websockets.connect
        self._channels: dict[str, LiveChannel] = {}

    def channel_url(self, key: str) -> str:
        """Endpoint for a channel key."""
        return f"{self._live_url}/ws/admin?{urlencode({'session_id': key})}"

    def get(self, key: str) -> LiveChannel | None:
        return self._channels.get(key)

    @property
    def keys(self) -> list[str]:
        return list(self._channels)

    async def open(
        self, key: str, reconnect_delay: float | None = None
    ) -> LiveChannel:
        """Open the channel for key, closing any existing one first."""
        existing = self._channels.pop(key, None)
        if existing is not None:
            logger.info("Replacing existing live channel %s", key)
            await existing.close()

        channel = LiveChannel(
            key=key,
            url=self.channel_url(key),
            reconnect_delay=(
                self._reconnect_delay if reconnect_delay is None else reconnect_delay
            ),
            connect=self._connect,
        )
        self._channels[key] = channel
        channel.start()
        return channel

    async def close(self, channel: LiveChannel) -> None:
        """Close a channel; no reconnects follow."""
        if self._channels.get(channel.key) is channel:
            del self._channels[channel.key]
        await channel.close()

    async def close_all(self) -> None:
        """Close every open channel."""
        channels = list(self._channels.values())
        self._channels.clear()
        for channel in channels:
            await channel.close()
