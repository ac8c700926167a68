"""Async MongoDB helpers built on top of Motor.

Only generic utilities live here; domain repositories import these helpers and
build their own collections, indexes and invariants on top."""

from functools import lru_cache
from typing import Any, Optional

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .settings import settings

_override_db: Optional[Any] = None


@lru_cache
def get_mongo_client() -> AsyncIOMotorClient:
    """Return a cached Motor client configured via ``db_core.settings``."""

    return AsyncIOMotorClient(
        settings.uri,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )


def use_database(db: Optional[Any]) -> None:
    """
    Route every ``get_db`` call to ``db`` instead of the configured client.

    Any object exposing the Motor database API works (e.g. a mongomock-motor
    database in tests). Pass ``None`` to go back to the configured client.
    """

    global _override_db
    _override_db = db


def get_db() -> AsyncIOMotorDatabase:
    """Return the main application database defined by ``settings.db_name``."""

    if _override_db is not None:
        return _override_db
    client = get_mongo_client()
    return client[settings.db_name]


def close_mongo_client() -> None:
    """Close the cached client, if one was ever created."""

    if get_mongo_client.cache_info().currsize:
        get_mongo_client().close()
        get_mongo_client.cache_clear()
        logger.info("MongoDB client closed")
