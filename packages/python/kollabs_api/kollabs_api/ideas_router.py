"""FastAPI router exposing idea operations."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from kollabs_repo import IdeaStatus, create_idea, delete_idea, get_idea, list_ideas, update_idea

from .responses import send_success
from .schemas import IdeaCreate, IdeaUpdate

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.post("", status_code=201)
async def post_idea(payload: IdeaCreate) -> JSONResponse:
    """Create a new idea (status defaults to draft)."""

    idea = await create_idea(
        title=payload.title,
        description=payload.description,
        created_by=payload.created_by,
        status=payload.status,
    )
    return send_success(idea, "Idea created successfully", status_code=201)


@router.get("")
async def get_ideas(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: Optional[IdeaStatus] = Query(default=None),
    created_by: Optional[str] = Query(default=None, alias="createdBy"),
    sort_by: Literal["createdAt", "updatedAt", "title"] = Query(default="createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
) -> JSONResponse:
    """Return a page of ideas with their ``hasActiveKollab`` flag."""

    result = await list_ideas(
        status=status,
        created_by=created_by,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=limit,
    )
    return send_success(result)


@router.get("/{idea_id}")
async def get_idea_by_id(idea_id: str) -> JSONResponse:
    return send_success(await get_idea(idea_id))


@router.patch("/{idea_id}")
async def patch_idea(idea_id: str, payload: IdeaUpdate) -> JSONResponse:
    """Update title, description, author or status of an idea."""

    idea = await update_idea(idea_id, payload.model_dump(exclude_unset=True))
    return send_success(idea, "Idea updated successfully")


@router.delete("/{idea_id}")
async def remove_idea(idea_id: str) -> JSONResponse:
    """Delete an idea; refused while an active kollab references it."""

    await delete_idea(idea_id)
    return send_success(message="Idea deleted successfully")
