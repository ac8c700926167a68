"""Minimal MongoDB helpers shared across domain repositories.

Example usage in a domain repository:

    from db_core import get_db

    async def list_active_kollabs(idea_id: str):
        db = get_db()
        cursor = db["kollabs"].find({"idea_id": idea_id, "status": "active"})
        return await cursor.to_list(length=None)
"""

from .settings import MongoSettings, settings
from .mongo import close_mongo_client, get_db, get_mongo_client, use_database

__all__ = [
    "MongoSettings",
    "settings",
    "get_mongo_client",
    "get_db",
    "use_database",
    "close_mongo_client",
]
