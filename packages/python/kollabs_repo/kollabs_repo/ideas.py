"""Async persistence layer and lifecycle rules for ideas."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from .errors import ConflictError, InvalidFieldsError, NotFoundError
from .models import Idea, IdeaStatus, Page, new_id, utcnow
from .pagination import build_page
from .storage import (
    idea_from_doc,
    idea_to_doc,
    ideas_collection,
    kollabs_collection,
    validate_model,
)

SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
}
SORT_ORDERS = {"asc": ASCENDING, "desc": DESCENDING}
UPDATABLE_FIELDS = frozenset({"title", "description", "created_by", "status"})

# Set on an idea while ``delete_idea`` is deciding; see ``kollabs.create_kollab``.
DELETION_FENCE = "deleting"


async def has_active_kollab(idea_id: str) -> bool:
    doc = await kollabs_collection().find_one(
        {"idea_id": idea_id, "status": "active"}, {"_id": 1}
    )
    return doc is not None


async def active_idea_ids(idea_ids: Iterable[str]) -> set[str]:
    """Return the subset of ``idea_ids`` that currently have an active kollab."""

    ids = list(idea_ids)
    if not ids:
        return set()
    cursor = kollabs_collection().find(
        {"idea_id": {"$in": ids}, "status": "active"}, {"idea_id": 1}
    )
    return {doc["idea_id"] async for doc in cursor}


async def create_idea(
    title: str,
    description: str,
    created_by: str,
    status: Optional[IdeaStatus] = None,
) -> Idea:
    """Persist a new idea; status defaults to ``draft``."""

    now = utcnow()
    idea = validate_model(
        Idea,
        {
            "id": new_id(),
            "title": title,
            "description": description,
            "created_by": created_by,
            "status": status or "draft",
            "created_at": now,
            "updated_at": now,
        },
    )
    await ideas_collection().insert_one(idea_to_doc(idea))
    logger.info("Idea {idea_id} created with status {status}", idea_id=idea.id, status=idea.status)
    return idea


async def get_idea(idea_id: str) -> Idea:
    doc = await ideas_collection().find_one({"_id": idea_id})
    if not doc:
        raise NotFoundError("Idea not found")
    return idea_from_doc(doc, has_active_kollab=await has_active_kollab(idea_id))


async def list_ideas(
    *,
    status: Optional[IdeaStatus] = None,
    created_by: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    page: int = 1,
    page_size: int = 10,
) -> Page[Idea]:
    """
    Return one page of ideas, each annotated with ``has_active_kollab``.

    The flag is resolved with a single ``$in`` query over the page's ids rather
    than one lookup per idea.
    """

    if sort_by not in SORT_FIELDS:
        raise InvalidFieldsError(f"sortBy: must be one of {', '.join(SORT_FIELDS)}")
    if sort_order not in SORT_ORDERS:
        raise InvalidFieldsError("sortOrder: must be one of asc, desc")
    if page < 1 or page_size < 1:
        raise InvalidFieldsError("page and pageSize must be positive integers")

    query: dict[str, Any] = {}
    if status:
        query["status"] = status
    if created_by:
        query["created_by"] = created_by

    direction = SORT_ORDERS[sort_order]
    collection = ideas_collection()
    cursor = (
        collection.find(query)
        .sort([(SORT_FIELDS[sort_by], direction), ("_id", direction)])
        .skip((page - 1) * page_size)
        .limit(page_size)
    )
    docs, total_items = await asyncio.gather(
        cursor.to_list(length=page_size),
        collection.count_documents(query),
    )

    active = await active_idea_ids(str(doc["_id"]) for doc in docs)
    items = [idea_from_doc(doc, has_active_kollab=str(doc["_id"]) in active) for doc in docs]
    return build_page(items, total_items, page, page_size)


async def update_idea(idea_id: str, fields: Mapping[str, Any]) -> Idea:
    """Merge ``fields`` into the idea and re-validate the result."""

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidFieldsError(f"Unknown idea fields: {', '.join(sorted(unknown))}")
    if not fields:
        raise InvalidFieldsError("At least one field must be provided")

    collection = ideas_collection()
    doc = await collection.find_one({"_id": idea_id})
    if not doc:
        raise NotFoundError("Idea not found")

    merged = idea_from_doc(doc).model_dump()
    merged.update(fields)
    merged["updated_at"] = utcnow()
    idea = validate_model(Idea, merged)

    changes = {name: getattr(idea, name) for name in fields}
    changes["updated_at"] = idea.updated_at
    updated = await collection.find_one_and_update(
        {"_id": idea_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise NotFoundError("Idea not found")

    if "status" in fields and doc.get("status") != idea.status:
        logger.info(
            "Idea {idea_id} status {old} -> {new}",
            idea_id=idea_id,
            old=doc.get("status"),
            new=idea.status,
        )
    return idea_from_doc(updated, has_active_kollab=await has_active_kollab(idea_id))


async def delete_idea(idea_id: str) -> None:
    """
    Delete an idea unless an active kollab references it.

    The idea is fenced before the active-kollab check so that a concurrent
    ``create_kollab`` either becomes visible to the check (and blocks the
    delete) or observes the fence afterwards and rolls itself back. The fence
    is lifted again whenever the idea survives, including on errors and
    cancellation.
    """

    collection = ideas_collection()
    fenced = await collection.find_one_and_update(
        {"_id": idea_id},
        {"$set": {DELETION_FENCE: True}},
        projection={"_id": 1},
    )
    if fenced is None:
        raise NotFoundError("Idea not found")

    try:
        if await has_active_kollab(idea_id):
            logger.warning("Refused to delete idea {idea_id}: active kollab exists", idea_id=idea_id)
            raise ConflictError(
                "Cannot delete idea with active Kollab",
                error="active Kollab references this idea",
            )
        await collection.delete_one({"_id": idea_id})
    except BaseException:
        await collection.update_one({"_id": idea_id}, {"$unset": {DELETION_FENCE: ""}})
        raise

    logger.info("Idea {idea_id} deleted", idea_id=idea_id)
