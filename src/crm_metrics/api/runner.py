#!/usr/bin/env python3
"""FastAPI server runner."""

from __future__ import annotations

import uvicorn
import structlog

from crm_metrics.api.app import create_app
from crm_metrics.config.loader import load_config
from crm_metrics.logging.setup import setup_logging

logger = structlog.get_logger()


def main(config_path: str | None = None) -> None:
    """Run the FastAPI server."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)

    logger.info("Starting FastAPI server", port=config.api.port)

    try:
        uvicorn.run(
            create_app(config),
            host="0.0.0.0",
            port=config.api.port,
            log_config=None  # Use our structlog setup
        )
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        raise


if __name__ == "__main__":
    main()
