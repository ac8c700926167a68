"""Pydantic models describing Ideas, Kollabs and their embedded discussions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Generic, List, Literal, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

IdeaStatus = Literal["draft", "approved", "archived"]
KollabStatus = Literal["active", "completed", "cancelled"]

MAX_DISCUSSIONS = 1000
MAX_PARTICIPANTS = 50

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=200)]
Description = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=10, max_length=5000)
]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
Goal = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=1000)]
SuccessCriteria = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=10, max_length=2000)
]
Message = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]
Participants = Annotated[List[PersonName], Field(min_length=1, max_length=MAX_PARTICIPANTS)]

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Idea(CamelModel):
    """An idea record. ``has_active_kollab`` is resolved at read time."""

    id: str
    title: Title
    description: Description
    created_by: PersonName
    status: IdeaStatus = "draft"
    created_at: datetime
    updated_at: datetime
    has_active_kollab: bool = False


class IdeaSummary(CamelModel):
    """Read-only projection of an idea embedded in kollab responses."""

    id: str
    title: str
    description: str
    status: IdeaStatus


class Discussion(CamelModel):
    """A threaded message embedded in a kollab's discussion list."""

    id: str = Field(default_factory=new_id)
    message: Message
    author: PersonName
    parent_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Kollab(CamelModel):
    """A collaboration session spawned from exactly one approved idea."""

    id: str
    idea_id: str
    goal: Goal
    participants: Participants
    success_criteria: SuccessCriteria
    status: KollabStatus = "active"
    discussions: List[Discussion] = Field(default_factory=list, max_length=MAX_DISCUSSIONS)
    created_at: datetime
    updated_at: datetime


class KollabDetail(Kollab):
    """Kollab plus its idea; ``idea`` is None once the idea has been deleted."""

    idea: Optional[IdeaSummary] = None


class Page(CamelModel, Generic[T]):
    items: List[T]
    total_items: int
    current_page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
