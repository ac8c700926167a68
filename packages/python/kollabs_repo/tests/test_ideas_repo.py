import pytest

from kollabs_repo import (
    ConflictError,
    InvalidFieldsError,
    NotFoundError,
    create_idea,
    create_kollab,
    delete_idea,
    get_idea,
    list_ideas,
    update_idea,
    update_kollab,
)
from kollabs_repo import ideas as ideas_module


async def _make_idea(title, status=None, created_by="Alice"):
    return await create_idea(
        title=title,
        description="A description long enough to pass",
        created_by=created_by,
        status=status,
    )


@pytest.mark.asyncio
async def test_create_idea_defaults_to_draft(db):
    idea = await _make_idea("  Trimmed title  ")

    assert idea.status == "draft"
    assert idea.title == "Trimmed title"
    assert idea.has_active_kollab is False
    stored = await db["ideas"].find_one({"_id": idea.id})
    assert stored["created_by"] == "Alice"
    assert "has_active_kollab" not in stored


@pytest.mark.asyncio
async def test_create_idea_rejects_short_title(db):
    with pytest.raises(InvalidFieldsError):
        await _make_idea("ab")


@pytest.mark.asyncio
async def test_get_idea_not_found(db):
    with pytest.raises(NotFoundError):
        await get_idea("missing")


@pytest.mark.asyncio
async def test_get_idea_reports_active_kollab(approved_idea, active_kollab):
    idea = await get_idea(approved_idea.id)

    assert idea.has_active_kollab is True

    await update_kollab(active_kollab.id, {"status": "completed"})
    assert (await get_idea(approved_idea.id)).has_active_kollab is False


@pytest.mark.asyncio
async def test_list_ideas_paginates_and_filters(db):
    for index in range(5):
        await _make_idea(f"Idea number {index}", status="approved" if index % 2 else "draft")

    first = await list_ideas(sort_by="title", sort_order="asc", page=1, page_size=2)
    assert [item.title for item in first.items] == ["Idea number 0", "Idea number 1"]
    assert first.total_items == 5
    assert first.total_pages == 3
    assert first.has_next_page is True
    assert first.has_previous_page is False

    last = await list_ideas(sort_by="title", sort_order="asc", page=3, page_size=2)
    assert [item.title for item in last.items] == ["Idea number 4"]
    assert last.has_next_page is False
    assert last.has_previous_page is True

    approved = await list_ideas(status="approved", sort_by="title", sort_order="desc")
    assert [item.title for item in approved.items] == ["Idea number 3", "Idea number 1"]


@pytest.mark.asyncio
async def test_list_ideas_annotates_active_kollab(approved_idea, active_kollab):
    other = await _make_idea("Another idea")

    page = await list_ideas()

    flags = {item.id: item.has_active_kollab for item in page.items}
    assert flags == {approved_idea.id: True, other.id: False}


@pytest.mark.asyncio
async def test_list_ideas_rejects_unknown_sort(db):
    with pytest.raises(InvalidFieldsError):
        await list_ideas(sort_by="createdBy")


@pytest.mark.asyncio
async def test_update_idea_merges_and_revalidates(db):
    idea = await _make_idea("Original title")

    updated = await update_idea(idea.id, {"status": "approved"})
    assert updated.status == "approved"
    assert updated.title == "Original title"

    with pytest.raises(InvalidFieldsError):
        await update_idea(idea.id, {"status": "published"})
    with pytest.raises(InvalidFieldsError):
        await update_idea(idea.id, {"owner": "Mallory"})
    with pytest.raises(NotFoundError):
        await update_idea("missing", {"title": "Whatever"})


@pytest.mark.asyncio
async def test_delete_idea_refused_while_kollab_active(approved_idea, active_kollab, db):
    with pytest.raises(ConflictError):
        await delete_idea(approved_idea.id)

    stored = await db["ideas"].find_one({"_id": approved_idea.id})
    assert stored is not None
    assert not stored.get("deleting")


@pytest.mark.asyncio
async def test_delete_idea_after_kollab_completed(approved_idea, active_kollab, db):
    await update_kollab(active_kollab.id, {"status": "completed"})

    await delete_idea(approved_idea.id)

    assert await db["ideas"].find_one({"_id": approved_idea.id}) is None
    with pytest.raises(NotFoundError):
        await delete_idea(approved_idea.id)


@pytest.mark.asyncio
async def test_failed_delete_lifts_the_fence(approved_idea, db, monkeypatch):
    async def _store_down(_idea_id):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(ideas_module, "has_active_kollab", _store_down)

    with pytest.raises(RuntimeError):
        await delete_idea(approved_idea.id)

    stored = await db["ideas"].find_one({"_id": approved_idea.id})
    assert stored is not None
    assert "deleting" not in stored

    kollab = await create_kollab(
        idea_id=approved_idea.id,
        goal="Complete the project successfully",
        participants=["Ann"],
        success_criteria="All done and signed off",
    )
    assert kollab.status == "active"
