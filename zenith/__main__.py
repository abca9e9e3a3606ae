#!/usr/bin/env python3
"""
Zenith key-path document store: HTTP server entry point.

Usage:
    python -m zenith

    # Or with custom config
    ZENITH_PORT=8080 ZENITH_JWT_SECRET=... python -m zenith
"""

from __future__ import annotations

import logging
import sys

import uvicorn

from zenith.api.app import create_app
from zenith.core import constants as C
from zenith.core.config import ZenithConfig
from zenith.engine import ZenithEngine
from zenith.observability.logging import LogLevel, setup_logging

logger = logging.getLogger("zenith")


def main() -> int:
    """Load config, build the engine, and serve until interrupted."""
    config_result = ZenithConfig.from_env()
    if config_result.is_err():
        print(f"Configuration error: {config_result.error}", file=sys.stderr)
        return 1

    config = config_result.unwrap()

    validation = config.validate()
    if validation.is_err():
        print(f"Validation error: {validation.error}", file=sys.stderr)
        return 1

    setup_logging(
        LogLevel.parse(config.observability.log_level),
        json_output=config.observability.log_json,
    )
    if config.auth.jwt_secret == C.DEV_JWT_SECRET:
        logger.warning("Using the development JWT secret; set ZENITH_JWT_SECRET")

    engine = ZenithEngine(config)
    app = create_app(engine)

    logger.info(
        f"Zenith API listening on http://{config.server.host}:{config.server.port}"
        f"{config.server.api_prefix}"
    )
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        lifespan="on",
    )
    return 0


def run() -> None:
    """Synchronous entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
