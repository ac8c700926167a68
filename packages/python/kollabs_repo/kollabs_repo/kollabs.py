"""Async persistence layer and lifecycle rules for kollabs."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from loguru import logger
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from .errors import ConflictError, ForbiddenError, InvalidFieldsError, KollabsError, NotFoundError
from .ideas import DELETION_FENCE, has_active_kollab
from .models import Kollab, KollabDetail, new_id, utcnow
from .storage import (
    IDEA_SUMMARY_PROJECTION,
    ideas_collection,
    kollab_detail_from_doc,
    kollab_from_doc,
    kollab_to_doc,
    kollabs_collection,
    validate_model,
)

UPDATABLE_FIELDS = frozenset({"goal", "participants", "success_criteria", "status"})


def _duplicate_active_kollab() -> ConflictError:
    return ConflictError(
        "Duplicate active Kollab not allowed",
        error="active Kollab already exists",
    )


async def _idea_gone_error(idea_id: str) -> Optional[KollabsError]:
    """Return the error to report when the idea is deleted or fenced for deletion."""

    idea_doc = await ideas_collection().find_one({"_id": idea_id}, {DELETION_FENCE: 1})
    if idea_doc is None:
        return NotFoundError(f"Idea not found: {idea_id}")
    if idea_doc.get(DELETION_FENCE):
        return ConflictError("Idea is being deleted", data={"ideaId": idea_id})
    return None


async def _release_if_idea_gone(kollab: Kollab) -> None:
    """Undo a fresh insert when the idea was deleted or fenced for deletion meanwhile."""

    error = await _idea_gone_error(kollab.idea_id)
    if error is None:
        return

    await kollabs_collection().delete_one({"_id": kollab.id})
    logger.warning(
        "Rolled back kollab {kollab_id}: idea {idea_id} is being deleted",
        kollab_id=kollab.id,
        idea_id=kollab.idea_id,
    )
    raise error


async def create_kollab(
    idea_id: str,
    goal: str,
    participants: List[str],
    success_criteria: str,
) -> Kollab:
    """
    Create the active kollab for an approved idea.

    The lookup for an existing active kollab only saves a write in the common
    case. Two requests can both pass it; the unique partial index then rejects
    the second insert, which is reported with the same conflict.
    """

    idea_doc = await ideas_collection().find_one({"_id": idea_id})
    if not idea_doc:
        raise NotFoundError(f"Idea not found: {idea_id}")

    current_status = idea_doc.get("status")
    if current_status != "approved":
        logger.warning(
            "Rejected kollab creation for idea {idea_id} with status {status}",
            idea_id=idea_id,
            status=current_status,
        )
        raise ForbiddenError(
            "Cannot create Kollab from non-approved idea",
            data={"currentStatus": current_status, "requiredStatus": "approved"},
        )

    if await has_active_kollab(idea_id):
        raise _duplicate_active_kollab()

    now = utcnow()
    kollab = validate_model(
        Kollab,
        {
            "id": new_id(),
            "idea_id": idea_id,
            "goal": goal,
            "participants": participants,
            "success_criteria": success_criteria,
            "status": "active",
            "discussions": [],
            "created_at": now,
            "updated_at": now,
        },
    )

    try:
        await kollabs_collection().insert_one(kollab_to_doc(kollab))
    except DuplicateKeyError as exc:
        logger.warning(
            "Concurrent active kollab insert for idea {idea_id} rejected by unique index",
            idea_id=idea_id,
        )
        raise _duplicate_active_kollab() from exc

    await _release_if_idea_gone(kollab)
    logger.info("Kollab {kollab_id} created for idea {idea_id}", kollab_id=kollab.id, idea_id=idea_id)
    return kollab


async def get_kollab(kollab_id: str) -> KollabDetail:
    doc = await kollabs_collection().find_one({"_id": kollab_id})
    if not doc:
        raise NotFoundError("Kollab not found")
    idea_doc = await ideas_collection().find_one({"_id": doc["idea_id"]}, IDEA_SUMMARY_PROJECTION)
    return kollab_detail_from_doc(doc, idea_doc)


async def update_kollab(kollab_id: str, fields: Mapping[str, Any]) -> Kollab:
    """
    Merge ``fields`` into the kollab and re-validate the result.

    Status changes are limited to enum membership here. Moving a kollab back to
    ``active`` is still subject to the one-active-per-idea constraint and
    needs the idea to exist. A reactivation that races ``delete_idea`` is
    reverted once the write sees the deletion fence.
    """

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidFieldsError(f"Unknown kollab fields: {', '.join(sorted(unknown))}")
    if not fields:
        raise InvalidFieldsError("At least one field must be provided")

    collection = kollabs_collection()
    doc = await collection.find_one({"_id": kollab_id})
    if not doc:
        raise NotFoundError("Kollab not found")

    merged = kollab_from_doc(doc).model_dump()
    merged.update(fields)
    merged["updated_at"] = utcnow()
    kollab = validate_model(Kollab, merged)

    reactivating = kollab.status == "active" and doc.get("status") != "active"
    if reactivating:
        error = await _idea_gone_error(kollab.idea_id)
        if error is not None:
            raise error
        if await has_active_kollab(kollab.idea_id):
            raise _duplicate_active_kollab()

    changes = {name: getattr(kollab, name) for name in fields}
    changes["updated_at"] = kollab.updated_at
    try:
        updated = await collection.find_one_and_update(
            {"_id": kollab_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as exc:
        raise _duplicate_active_kollab() from exc
    if updated is None:
        raise NotFoundError("Kollab not found")

    if reactivating:
        error = await _idea_gone_error(kollab.idea_id)
        if error is not None:
            await collection.update_one(
                {"_id": kollab_id},
                {"$set": {name: doc.get(name) for name in changes}},
            )
            logger.warning(
                "Reverted reactivation of kollab {kollab_id}: idea {idea_id} is being deleted",
                kollab_id=kollab_id,
                idea_id=kollab.idea_id,
            )
            raise error

    if doc.get("status") != kollab.status:
        logger.info(
            "Kollab {kollab_id} status {old} -> {new}",
            kollab_id=kollab_id,
            old=doc.get("status"),
            new=kollab.status,
        )
    return kollab_from_doc(updated)


async def delete_kollab(kollab_id: str) -> None:
    """Delete a completed or cancelled kollab; active ones are refused."""

    collection = kollabs_collection()
    result = await collection.delete_one({"_id": kollab_id, "status": {"$ne": "active"}})
    if result.deleted_count:
        logger.info("Kollab {kollab_id} deleted", kollab_id=kollab_id)
        return

    doc = await collection.find_one({"_id": kollab_id}, {"status": 1})
    if doc is None:
        raise NotFoundError("Kollab not found")
    raise ConflictError(
        "Cannot delete active Kollab; complete or cancel it first",
        data={"currentStatus": doc.get("status")},
    )
