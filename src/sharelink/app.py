# src/sharelink/app.py
"""
Application Entry Point - Server Initialization and Startup

This module serves as the entry point for the ShareLink file server.
It configures logging from settings, builds the FastAPI application and
hands it to uvicorn.

Files that USE this module:
- pyproject.toml (`sharelink` console script)
- python -m sharelink (module entry point)

Files that this module USES:
- sharelink.shared.logging_conf (configure_from_settings for logging configuration)
- sharelink.config (settings for host, port and logging)
- sharelink.adapters.web (create_app composition root)
"""

from __future__ import annotations

import logging
import os

import uvicorn

from sharelink.adapters.web import create_app
from sharelink.shared.logging_conf import configure_from_settings


def main() -> None:
    """
    Initialize and start the ShareLink server.

    Domain resolution is lazy: nothing is probed until the first request
    (or POST /api/domain/refresh) needs a public URL.
    """
    from sharelink.config import settings

    configure_from_settings(settings)
    logger = logging.getLogger(__name__)
    logger.info("Working directory: %s", os.getcwd())
    logger.info("Starting ShareLink on %s:%d", settings.app_host, settings.app_port)

    app = create_app(settings)
    try:
        # log_config=None keeps the handlers installed by setup_logging
        uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Server stopped by user (KeyboardInterrupt)")


if __name__ == "__main__":
    main()
