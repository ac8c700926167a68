"""Collection accessors, indexes and document conversion for the entity store.

Ideas and kollabs are top-level documents keyed by string ``_id`` values.
Discussions live embedded in their kollab and are never indexed on their own.

The single-active-kollab invariant is owned by the database: the unique
partial index ``idea_id_1_status_1`` only covers documents whose status is
``active``, so any number of completed or cancelled kollabs may share an idea
while a second active one is rejected with ``DuplicateKeyError``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar

from db_core import get_db
from loguru import logger
from pydantic import BaseModel, ValidationError
from pymongo import ASCENDING, DESCENDING

from .errors import InvalidFieldsError
from .models import Discussion, Idea, IdeaSummary, Kollab, KollabDetail

IDEAS_COLLECTION = "ideas"
KOLLABS_COLLECTION = "kollabs"
ACTIVE_KOLLAB_INDEX = "idea_id_1_status_1"

IDEA_SUMMARY_PROJECTION = {"title": 1, "description": 1, "status": 1}

M = TypeVar("M", bound=BaseModel)


def ideas_collection():
    return get_db()[IDEAS_COLLECTION]


def kollabs_collection():
    return get_db()[KOLLABS_COLLECTION]


async def ensure_indexes() -> None:
    """Create the secondary indexes and the active-kollab uniqueness constraint."""

    ideas = ideas_collection()
    await ideas.create_index([("status", ASCENDING)])
    await ideas.create_index([("created_by", ASCENDING)])
    await ideas.create_index([("created_at", DESCENDING)])

    kollabs = kollabs_collection()
    await kollabs.create_index([("idea_id", ASCENDING)])
    await kollabs.create_index([("status", ASCENDING)])
    await kollabs.create_index(
        [("idea_id", ASCENDING), ("status", ASCENDING)],
        name=ACTIVE_KOLLAB_INDEX,
        unique=True,
        partialFilterExpression={"status": "active"},
    )
    logger.info("Indexes ensured for {ideas} and {kollabs}", ideas=IDEAS_COLLECTION, kollabs=KOLLABS_COLLECTION)


def validate_model(model: Type[M], payload: Mapping[str, Any]) -> M:
    """Build ``model`` from ``payload``, surfacing failures as ``InvalidFieldsError``."""

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidFieldsError.from_validation_error(exc) from exc


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------


def idea_to_doc(idea: Idea) -> dict:
    return {
        "_id": idea.id,
        "title": idea.title,
        "description": idea.description,
        "created_by": idea.created_by,
        "status": idea.status,
        "created_at": idea.created_at,
        "updated_at": idea.updated_at,
    }


def idea_from_doc(doc: Mapping[str, Any], has_active_kollab: bool = False) -> Idea:
    return Idea(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc["description"],
        created_by=doc["created_by"],
        status=doc.get("status", "draft"),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
        has_active_kollab=has_active_kollab,
    )


def idea_summary_from_doc(doc: Optional[Mapping[str, Any]]) -> Optional[IdeaSummary]:
    if doc is None:
        return None
    return IdeaSummary(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc["description"],
        status=doc["status"],
    )


# ---------------------------------------------------------------------------
# Kollabs and discussions
# ---------------------------------------------------------------------------


def discussion_to_doc(discussion: Discussion) -> dict:
    return {
        "_id": discussion.id,
        "message": discussion.message,
        "author": discussion.author,
        "parent_id": discussion.parent_id,
        "created_at": discussion.created_at,
    }


def discussion_from_doc(doc: Mapping[str, Any]) -> Discussion:
    return Discussion(
        id=str(doc["_id"]),
        message=doc["message"],
        author=doc["author"],
        parent_id=doc.get("parent_id"),
        created_at=doc["created_at"],
    )


def kollab_to_doc(kollab: Kollab) -> dict:
    return {
        "_id": kollab.id,
        "idea_id": kollab.idea_id,
        "goal": kollab.goal,
        "participants": list(kollab.participants),
        "success_criteria": kollab.success_criteria,
        "status": kollab.status,
        "discussions": [discussion_to_doc(item) for item in kollab.discussions],
        "discussion_count": len(kollab.discussions),
        "created_at": kollab.created_at,
        "updated_at": kollab.updated_at,
    }


def _kollab_fields(doc: Mapping[str, Any]) -> dict:
    return {
        "id": str(doc["_id"]),
        "idea_id": doc["idea_id"],
        "goal": doc["goal"],
        "participants": doc.get("participants", []),
        "success_criteria": doc["success_criteria"],
        "status": doc.get("status", "active"),
        "discussions": [discussion_from_doc(item) for item in doc.get("discussions", [])],
        "created_at": doc["created_at"],
        "updated_at": doc["updated_at"],
    }


def kollab_from_doc(doc: Mapping[str, Any]) -> Kollab:
    return Kollab(**_kollab_fields(doc))


def kollab_detail_from_doc(
    doc: Mapping[str, Any],
    idea_doc: Optional[Mapping[str, Any]],
) -> KollabDetail:
    return KollabDetail(**_kollab_fields(doc), idea=idea_summary_from_doc(idea_doc))
