"""Request payloads accepted by the HTTP layer.

Strings are trimmed before their bounds are checked. Whitespace-only values
for required text fields are reported with the ``whitespace_only`` error type,
which the exception handlers turn into 422 instead of the 400 used for every
other schema failure.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from kollabs_repo.models import (
    CamelModel,
    Description,
    Goal,
    IdeaStatus,
    KollabStatus,
    Message,
    Participants,
    PersonName,
    SuccessCriteria,
    Title,
)

WHITESPACE_ONLY = "whitespace_only"


def reject_whitespace_only(value: Any, label: str, *, allow_empty: bool = False) -> Any:
    """Raise for strings that are blank after trimming.

    With ``allow_empty`` the empty string is left to the regular length check.
    """

    if isinstance(value, str) and not value.strip() and (value or not allow_empty):
        raise PydanticCustomError(
            WHITESPACE_ONLY, "{label} cannot be whitespace only", {"label": label}
        )
    return value


def _reject_blank_participants(value: Any) -> Any:
    if isinstance(value, list) and any(isinstance(item, str) and not item.strip() for item in value):
        raise PydanticCustomError(
            WHITESPACE_ONLY,
            "{label} cannot be whitespace only",
            {"label": "Participant names"},
        )
    return value


class IdeaCreate(CamelModel):
    title: Title
    description: Description
    created_by: PersonName
    status: Optional[IdeaStatus] = None


class IdeaUpdate(CamelModel):
    title: Optional[Title] = None
    description: Optional[Description] = None
    created_by: Optional[PersonName] = None
    status: Optional[IdeaStatus] = None


class KollabCreate(CamelModel):
    idea_id: str = Field(min_length=1)
    goal: Goal
    participants: Participants
    success_criteria: SuccessCriteria

    @field_validator("goal", mode="before")
    @classmethod
    def _goal_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Goal")

    @field_validator("success_criteria", mode="before")
    @classmethod
    def _criteria_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Success criteria")

    @field_validator("participants", mode="before")
    @classmethod
    def _participants_not_blank(cls, value: Any) -> Any:
        return _reject_blank_participants(value)


class KollabUpdate(CamelModel):
    goal: Optional[Goal] = None
    participants: Optional[Participants] = None
    success_criteria: Optional[SuccessCriteria] = None
    status: Optional[KollabStatus] = None

    @field_validator("goal", mode="before")
    @classmethod
    def _goal_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Goal")

    @field_validator("success_criteria", mode="before")
    @classmethod
    def _criteria_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Success criteria")

    @field_validator("participants", mode="before")
    @classmethod
    def _participants_not_blank(cls, value: Any) -> Any:
        return _reject_blank_participants(value)


class DiscussionCreate(CamelModel):
    message: Message
    author: PersonName
    parent_id: Optional[str] = Field(default=None, min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def _message_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Message", allow_empty=True)

    @field_validator("author", mode="before")
    @classmethod
    def _author_not_blank(cls, value: Any) -> Any:
        return reject_whitespace_only(value, "Author", allow_empty=True)
