"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "helpdesk.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
ENV_FILE = PROJECT_ROOT / ".env"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Reconnects faster than this would spin the event loop against a dead backend
MIN_RECONNECT_DELAY = 0.01


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def live_url_from(backend_url: str) -> str:
    """Derive the WebSocket base URL from the REST base URL."""
    if backend_url.startswith("https://"):
        return "wss://" + backend_url[len("https://"):]
    if backend_url.startswith("http://"):
        return "ws://" + backend_url[len("http://"):]
    return backend_url


@dataclass
class Settings:
    """Runtime settings, normally read from the environment."""

    backend_url: str = "http://localhost:8000"
    live_url: str = "ws://localhost:8000"
    agent_name: str = "system"
    conversation_reconnect_delay: float = 5.0
    escalation_reconnect_delay: float = 1.0
    request_timeout: float = 10.0
    db_path: PathLike = DEFAULT_DB_PATH
    api_host: str = "localhost"
    api_port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        backend_url = os.getenv("BACKEND_URL", "http://localhost:8000").rstrip("/")
        live_url = os.getenv("LIVE_URL") or live_url_from(backend_url)

        return cls(
            backend_url=backend_url,
            live_url=live_url.rstrip("/"),
            agent_name=os.getenv("AGENT_NAME", "system"),
            conversation_reconnect_delay=float(
                os.getenv("CONVERSATION_RECONNECT_DELAY", "5.0")
            ),
            escalation_reconnect_delay=float(
                os.getenv("ESCALATION_RECONNECT_DELAY", "1.0")
            ),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10.0")),
            db_path=resolve_db_path(os.getenv("DATABASE_URL")),
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=int(os.getenv("API_PORT", "8080")),
        )
