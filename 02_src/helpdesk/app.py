"""Application bootstrap and lifecycle management."""

from typing import Protocol

import httpx

from .backend import BackendClient
from .config import Settings
from .connection import ConnectFactory, ConnectionManager
from .conversation import ConversationView, HistoryLoader
from .escalation import EscalationListener, IssueService
from .logging_config import get_logger
from .notifications import Notifier
from .storage import IKeyValueStore, KeyValueStore

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Dashboard session: issue list, escalation feed, open conversation."""

    def __init__(
        self,
        settings: Settings | None = None,
        connect: ConnectFactory | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._connect = connect
        self._http_client = http_client

        # Components (will be initialized in start())
        self._storage: IKeyValueStore | None = None
        self._backend: BackendClient | None = None
        self._notifier: Notifier | None = None
        self._connections: ConnectionManager | None = None
        self._issues: IssueService | None = None
        self._conversation: ConversationView | None = None
        self._escalations: EscalationListener | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")
        settings = self._settings

        # 1. Storage (no dependencies)
        self._storage = KeyValueStore(settings.db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Backend client and notifier (no internal dependencies)
        self._backend = BackendClient(
            settings.backend_url,
            timeout=settings.request_timeout,
            client=self._http_client,
        )
        self._notifier = Notifier()

        # 3. ConnectionManager
        self._connections = ConnectionManager(
            settings.live_url,
            reconnect_delay=settings.conversation_reconnect_delay,
            connect=self._connect,
        )

        # 4. IssueService (depends on backend)
        self._issues = IssueService(self._backend)

        # 5. ConversationView (depends on connections, backend, notifier, issues)
        self._conversation = ConversationView(
            connections=self._connections,
            history=HistoryLoader(self._backend),
            backend=self._backend,
            notifier=self._notifier,
            agent_name=settings.agent_name,
            reconnect_delay=settings.conversation_reconnect_delay,
            on_message_sent=self._issues.on_message_sent,
        )

        # 6. EscalationListener (depends on connections, issues, notifier)
        self._escalations = EscalationListener(
            connections=self._connections,
            issues=self._issues.issues,
            notifier=self._notifier,
            reconnect_delay=settings.escalation_reconnect_delay,
        )
        await self._escalations.start()

        await self._issues.refresh()
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._escalations:
            await self._escalations.stop()
        if self._conversation:
            await self._conversation.close()
        if self._connections:
            await self._connections.close_all()
        if self._backend:
            await self._backend.aclose()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    @property
    def storage(self) -> IKeyValueStore:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def notifier(self) -> Notifier:
        if not self._notifier:
            raise RuntimeError("Application not started")
        return self._notifier

    @property
    def connections(self) -> ConnectionManager:
        if not self._connections:
            raise RuntimeError("Application not started")
        return self._connections

    @property
    def issues(self) -> IssueService:
        if not self._issues:
            raise RuntimeError("Application not started")
        return self._issues

    @property
    def conversation(self) -> ConversationView:
        if not self._conversation:
            raise RuntimeError("Application not started")
        return self._conversation

    @property
    def escalations(self) -> EscalationListener:
        if not self._escalations:
            raise RuntimeError("Application not started")
        return self._escalations
