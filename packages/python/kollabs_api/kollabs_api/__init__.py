"""Expose the kollabs FastAPI routers and error handlers."""

from fastapi import APIRouter

from .errors import register_exception_handlers
from .ideas_router import router as ideas_router
from .kollabs_router import router as kollabs_router

api_router = APIRouter(prefix="/api")
api_router.include_router(ideas_router)
api_router.include_router(kollabs_router)

__all__ = ["api_router", "ideas_router", "kollabs_router", "register_exception_handlers"]
