"""Main entry point for the helpdesk sync core."""

import uvicorn
from dotenv import load_dotenv

from helpdesk.config import ENV_FILE, Settings
from helpdesk.logging_config import setup_logging


def main():
    """Run the operator API."""
    load_dotenv(ENV_FILE)
    setup_logging()

    settings = Settings.from_env()

    from helpdesk.api import create_fastapi_app
    from helpdesk.app import Application

    app = create_fastapi_app(Application(settings))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
