"""FastAPI router exposing kollab and discussion operations."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from kollabs_repo import add_discussion, create_kollab, delete_kollab, get_kollab, update_kollab

from .responses import send_success
from .schemas import DiscussionCreate, KollabCreate, KollabUpdate

router = APIRouter(prefix="/kollabs", tags=["kollabs"])


@router.post("", status_code=201)
async def post_kollab(payload: KollabCreate) -> JSONResponse:
    """Start the active kollab of an approved idea."""

    kollab = await create_kollab(
        idea_id=payload.idea_id,
        goal=payload.goal,
        participants=payload.participants,
        success_criteria=payload.success_criteria,
    )
    return send_success(kollab, "Kollab created successfully", status_code=201)


@router.get("/{kollab_id}")
async def get_kollab_by_id(kollab_id: str) -> JSONResponse:
    """Return a kollab with a read-only summary of its idea."""

    return send_success(await get_kollab(kollab_id))


@router.patch("/{kollab_id}")
async def patch_kollab(kollab_id: str, payload: KollabUpdate) -> JSONResponse:
    kollab = await update_kollab(kollab_id, payload.model_dump(exclude_unset=True))
    return send_success(kollab, "Kollab updated successfully")


@router.delete("/{kollab_id}")
async def remove_kollab(kollab_id: str) -> JSONResponse:
    await delete_kollab(kollab_id)
    return send_success(message="Kollab deleted successfully")


@router.post("/{kollab_id}/discussions", status_code=201)
async def post_discussion(kollab_id: str, payload: DiscussionCreate) -> JSONResponse:
    """Append a (possibly threaded) message to an active kollab."""

    discussion = await add_discussion(
        kollab_id=kollab_id,
        message=payload.message,
        author=payload.author,
        parent_id=payload.parent_id,
    )
    return send_success(discussion, "Discussion added successfully", status_code=201)
