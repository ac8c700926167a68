"""FastAPI application composing the kollabs API routers."""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ._paths import ensure_local_packages_importable

ensure_local_packages_importable()

from .config import settings
from db_core import close_mongo_client
from kollabs_api import api_router, register_exception_handlers
from kollabs_repo import ensure_indexes


def _configure_logging() -> None:
    level = settings.log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.info("Logger configured at {level} level", level=level)


_configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await ensure_indexes()
    logger.info("Kollabs API starting in {env} mode", env=settings.app_env)
    yield
    close_mongo_client()
    logger.info("Kollabs API stopped")


app = FastAPI(title=settings.api_title, version=settings.api_version, lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
logger.info("CORS middleware added {origins}", origins=settings.cors_allow_origins)

register_exception_handlers(app, expose_internal_errors=not settings.is_production)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Simple liveness endpoint for load balancers and probes."""

    return {"status": "UP", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(api_router)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

"""Run with:

    uvicorn core_server.main:app --host 0.0.0.0 --port 3000 --reload
"""
