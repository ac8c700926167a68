"""Threaded discussions embedded in kollab documents.

Appends never read-modify-write the discussion list. Every precondition
(kollab is active, list below the cap, parent present in this kollab) is part
of the filter of one ``find_one_and_update`` with ``$push``, so concurrent
appends to the same kollab are serialized by the document update itself and
appends to different kollabs never touch each other.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from .errors import ConflictError, InvalidFieldsError, NotFoundError, UnprocessableEntityError
from .models import MAX_DISCUSSIONS, Discussion
from .storage import discussion_to_doc, kollabs_collection, validate_model

_APPEND_ATTEMPTS = 3


def _append_filter(kollab_id: str, parent_id: Optional[str]) -> dict[str, Any]:
    query: dict[str, Any] = {
        "_id": kollab_id,
        "status": "active",
        "discussion_count": {"$lt": MAX_DISCUSSIONS},
    }
    if parent_id is not None:
        query["discussions._id"] = parent_id
    return query


async def _raise_rejection(kollab_id: str, parent_id: Optional[str]) -> None:
    """Explain why the conditional append matched nothing; return if nothing explains it."""

    doc = await kollabs_collection().find_one({"_id": kollab_id})
    if doc is None:
        raise NotFoundError("Kollab not found")

    status = doc.get("status")
    if status != "active":
        raise ConflictError(
            "Cannot add discussion to non-active Kollab",
            data={"currentStatus": status, "requiredStatus": "active"},
        )

    discussions = doc.get("discussions", [])
    if len(discussions) >= MAX_DISCUSSIONS:
        raise UnprocessableEntityError(f"Maximum discussion limit reached ({MAX_DISCUSSIONS})")

    if parent_id is not None and not any(item.get("_id") == parent_id for item in discussions):
        raise NotFoundError("Parent discussion not found")


async def add_discussion(
    kollab_id: str,
    message: str,
    author: str,
    parent_id: Optional[str] = None,
) -> Discussion:
    """Append a discussion to an active kollab and return it."""

    collection = kollabs_collection()
    try:
        discussion = validate_model(
            Discussion,
            {"message": message, "author": author, "parent_id": parent_id},
        )
    except InvalidFieldsError:
        # An unknown kollab is reported ahead of field errors.
        if await collection.find_one({"_id": kollab_id}, {"_id": 1}) is None:
            raise NotFoundError("Kollab not found") from None
        raise

    update = {
        "$push": {"discussions": discussion_to_doc(discussion)},
        "$inc": {"discussion_count": 1},
        "$set": {"updated_at": discussion.created_at},
    }

    for attempt in range(1, _APPEND_ATTEMPTS + 1):
        matched = await collection.find_one_and_update(
            _append_filter(kollab_id, parent_id),
            update,
            projection={"_id": 1},
        )
        if matched is not None:
            logger.debug(
                "Discussion {discussion_id} appended to kollab {kollab_id}",
                discussion_id=discussion.id,
                kollab_id=kollab_id,
            )
            return discussion

        await _raise_rejection(kollab_id, parent_id)
        logger.debug(
            "Append to kollab {kollab_id} raced a concurrent change (attempt {attempt})",
            kollab_id=kollab_id,
            attempt=attempt,
        )

    raise ConflictError("Kollab changed while adding the discussion, please retry")
