"""Configuration helpers for MongoDB connections used by db_core.

Applications can create a new ``MongoSettings`` instance at startup and assign
it to ``db_core.settings`` before the first call to ``get_db`` to override the
defaults. Tests usually skip the client entirely and install a database with
``db_core.use_database``.
"""

import os

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

load_dotenv(find_dotenv(usecwd=True))


class MongoSettings(BaseModel):
    """Connection settings for the kollabs database."""

    uri: str = Field(
        default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017")
    )
    db_name: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "kollabs"))
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    )


settings: MongoSettings = MongoSettings()
logger.debug(
    "MongoSettings initialized with uri={uri} db_name={db_name}",
    uri=settings.uri,
    db_name=settings.db_name,
)
