"""
Main entrypoint: FastAPI server for reputation lookups and moderation.

Env: STEAM_WEB_API_KEY, FACEIT_SERVER_API_KEY, LEETIFY_API_KEY, DATABASE_URL or
PGREP_DB_PATH, API_HOST, API_PORT, LOG_LEVEL.

Equivalent: uvicorn backend_pgrep.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_pgrep.pgrep_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    import uvicorn

    from backend_pgrep.api_server.app import app
    from backend_pgrep.config import get_settings

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
