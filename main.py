"""
Entry point for the table browser service.

Responsibilities:
    - Load and validate configuration.
    - Configure logging.
    - Build the FastAPI app and serve it with uvicorn.
"""

import logging
import sys

import uvicorn

from app import create_app
from config import AppConfig
from logger import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    config = AppConfig.from_env()
    setup_logging(config.server.log_level)

    valid, errors = config.validate()
    if not valid:
        for error in errors:
            logger.error(error)
        sys.exit(1)

    app = create_app(config)
    logger.info(f"Starting server at http://{config.server.host}:{config.server.port}")
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)


if __name__ == "__main__":
    main()
