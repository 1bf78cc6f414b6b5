"""Blog post schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from docdrift.models.post import TITLE_MAX_LENGTH, normalize_labels
from docdrift.schemas.common import BaseSchema, TimestampMixin


class PostBase(BaseModel):
    """Shared label handling for post payloads."""

    @field_validator("labels", mode="before", check_fields=False)
    @classmethod
    def split_labels(cls, v):
        """Accept ``"a, b"`` as well as ``["a", "b"]``."""
        if v is None:
            return v
        return normalize_labels(v)


class PostCreate(PostBase):
    """Post creation payload."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=255)
    labels: list[str] = Field(default_factory=list)

    @field_validator("title", "content", "author")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("can't be blank")
        return v


class PostUpdate(PostBase):
    """Partial post update payload; omitted fields are left unchanged."""

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    content: str | None = None
    author: str | None = Field(None, max_length=255)
    labels: list[str] | None = None


class PostResponse(BaseSchema, TimestampMixin):
    """Post in API responses."""

    id: UUID
    title: str
    content: str
    author: str
    published_at: datetime | None = None
    labels: list[str]
    is_published: bool
