from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


# --- Post summary projection ---

class PostDto(BaseModel):
    """Read-only summary of a post, built straight from a projection row."""

    id: int
    title: str
    excerpt: str | None = None
    author_name: str | None = None
    comment_count: int = 0
    created_at: datetime
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Sorting ---

class SortKey(str, Enum):
    """PostDto fields the paged search can order by."""

    ID = "id"
    TITLE = "title"
    CREATED_AT = "created_at"
    COMMENT_COUNT = "comment_count"


# --- Seeding ---

class SeedResult(BaseModel):
    users: int = 0
    posts: int = 0
    comments: int = 0

    @property
    def seeded(self) -> bool:
        return self.posts > 0
