"""
ASGI Entry Point for the redline API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads environment variables from `.env` before the application factory runs,
so `REDLINE_PLAN_DIR` and friends are visible to the cached settings.

Usage
-----
Run via the module entry point:
    $ python -m redline.api.server

Or via uvicorn directly:
    $ uvicorn redline.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from redline.api.app import create_app
from redline.core.settings import get_logger, load_settings

# Load .env BEFORE the factory reads settings.
load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the API server; host/port default to the configured values."""
    settings = load_settings()
    bind_host = host or settings.host
    bind_port = port if port is not None else settings.port
    get_logger("redline.api").info("Serving redline API on http://%s:%d", bind_host, bind_port)

    uvicorn.run(
        "redline.api.server:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
