"""Ideas, kollabs and threaded discussions backed by MongoDB."""

from .discussions import add_discussion
from .errors import (
    ConflictError,
    ForbiddenError,
    InvalidFieldsError,
    KollabsError,
    NotFoundError,
    UnprocessableEntityError,
)
from .ideas import create_idea, delete_idea, get_idea, has_active_kollab, list_ideas, update_idea
from .kollabs import create_kollab, delete_kollab, get_kollab, update_kollab
from .models import (
    MAX_DISCUSSIONS,
    Discussion,
    Idea,
    IdeaStatus,
    IdeaSummary,
    Kollab,
    KollabDetail,
    KollabStatus,
    Page,
)
from .storage import ensure_indexes

__all__ = [
    "MAX_DISCUSSIONS",
    "Discussion",
    "Idea",
    "IdeaStatus",
    "IdeaSummary",
    "Kollab",
    "KollabDetail",
    "KollabStatus",
    "Page",
    "KollabsError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "UnprocessableEntityError",
    "InvalidFieldsError",
    "ensure_indexes",
    "create_idea",
    "get_idea",
    "list_ideas",
    "update_idea",
    "delete_idea",
    "has_active_kollab",
    "create_kollab",
    "get_kollab",
    "update_kollab",
    "delete_kollab",
    "add_discussion",
]
