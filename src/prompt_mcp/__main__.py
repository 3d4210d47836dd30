"""Entry point for running the prompt MCP server."""

import logging

import uvicorn

from .config import get_settings
from .main import create_app

logger = logging.getLogger(__name__)


def main():
    """Run the prompt MCP server."""
    settings = get_settings()
    app = create_app(settings)

    logger.info(f"MCP prompt server listening on port {settings.app_port}")

    uvicorn.run(
        app,
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
