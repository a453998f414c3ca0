"""API routes module."""

from api.routes.admin import router as admin_router
from api.routes.leagues import router as leagues_router
from api.routes.settlement import router as settlement_router
from api.routes.wagers import router as wagers_router

__all__ = [
    "admin_router",
    "leagues_router",
    "settlement_router",
    "wagers_router",
]
