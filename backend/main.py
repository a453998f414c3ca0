"""
Main FastAPI application entry point for the fantasy sportsbook.

This is the core application file that:
- Initializes FastAPI with lifespan management
- Configures CORS for frontend integration
- Sets up Logfire observability
- Maps domain errors to JSON responses
- Provides health check endpoints and mounts the API routers
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict

import logfire
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import admin_router, leagues_router, settlement_router, wagers_router
from config import settings
from database import check_db_connection, close_db, get_db_info, init_db
from observability import initialize_logfire
from utils.errors import SportsbookError, format_api_error, format_log_error

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    initialize_logfire(settings, app)

    logfire.info(
        "Starting Sportsbook API Server",
        environment=settings.environment,
        debug=settings.debug,
    )

    if settings.auto_create_tables:
        await init_db()

    db_connected = await check_db_connection()
    db_info = get_db_info()
    if db_connected:
        logfire.info(
            "Database connection successful",
            url=db_info["url"],
            dialect=db_info["dialect"],
        )
    else:
        logfire.error(
            "Database connection failed",
            url=db_info["url"],
            dialect=db_info["dialect"],
        )

    logfire.info("Sportsbook API Server startup complete")

    yield

    # Shutdown
    logfire.info("Shutting down Sportsbook API Server")
    await close_db()


# Initialize FastAPI app
app = FastAPI(
    title="Fantasy Sportsbook API",
    description="Peer-to-peer token wagering on fantasy football matchups",
    version=API_VERSION,
    lifespan=lifespan,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SportsbookError)
async def sportsbook_error_handler(request: Request, exc: SportsbookError) -> JSONResponse:
    """Render domain errors as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed",
            extra=format_log_error(exc),
        )
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=format_api_error(exc))


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        dict: Health status of the application and database
    """
    db_connected = await check_db_connection()

    return {
        "status": "healthy" if db_connected else "degraded",
        "service": "sportsbook-api",
        "version": API_VERSION,
        "database": "connected" if db_connected else "disconnected",
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.

    Returns:
        dict: Basic API information
    """
    return {
        "name": "Fantasy Sportsbook API",
        "version": API_VERSION,
        "description": "Wager lifecycle and settlement for fantasy football leagues",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

app.include_router(leagues_router)
app.include_router(wagers_router)
app.include_router(settlement_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
