"""Logfire cloud observability initialization and instrumentation."""

import logging
from typing import Optional

import logfire
from fastapi import FastAPI

from config import Settings

logger = logging.getLogger(__name__)

SERVICE_NAME = "fantasy-sportsbook"


def initialize_logfire(settings: Settings, app: Optional[FastAPI] = None) -> bool:
    """
    Initialize Logfire and instrument the app.

    Must be called once at startup. Without a token Logfire is configured
    locally only, so ``logfire.info`` calls stay harmless. Instruments:
    - FastAPI request handling (when an app is given)
    - HTTPX clients (Sleeper API)
    - Python logging (bridged to Logfire)

    Returns:
        True when spans are shipped to Logfire cloud.
    """
    enabled = bool(settings.logfire_token)

    try:
        logfire.configure(
            token=settings.logfire_token or None,
            send_to_logfire="if-token-present",
            service_name=SERVICE_NAME,
            environment=settings.environment,
            console=False,
        )

        if not enabled:
            logger.warning("Logfire token not set - observability disabled")
            return False

        if app is not None:
            logfire.instrument_fastapi(app)

        logfire.instrument_httpx()

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("Logfire cloud tracking initialized")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
