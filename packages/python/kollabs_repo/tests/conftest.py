from uuid import uuid4

import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from db_core import use_database
from kollabs_repo import create_idea, create_kollab, ensure_indexes


@pytest_asyncio.fixture()
async def db():
    database = AsyncMongoMockClient()[f"kollabs_test_{uuid4().hex}"]
    use_database(database)
    await ensure_indexes()
    yield database
    use_database(None)


@pytest_asyncio.fixture()
async def approved_idea(db):
    return await create_idea(
        title="Shared garden",
        description="Turn the empty lot into a community garden",
        created_by="Alice",
        status="approved",
    )


@pytest_asyncio.fixture()
async def active_kollab(approved_idea):
    return await create_kollab(
        idea_id=approved_idea.id,
        goal="Complete the project successfully",
        participants=["Alice", "Bob"],
        success_criteria="All beds planted by spring",
    )
