"""Blog post model."""

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Select, String, Text, select
from sqlalchemy.orm import Mapped, mapped_column

from docdrift.models.base import BaseModel

TITLE_MAX_LENGTH = 255


def normalize_labels(labels: str | list[str] | None) -> list[str]:
    """Turn a comma-separated string or a list into clean label strings.

    Blank entries are dropped. No labels gives an empty list.
    """
    if not labels:
        return []
    if isinstance(labels, str):
        labels = labels.split(",")
    return [str(label).strip() for label in labels if label is not None and str(label).strip()]


class Post(BaseModel):
    """A blog post. Drafts have no ``published_at``."""

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    labels: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    def __init__(self, **kwargs):
        kwargs["labels"] = normalize_labels(kwargs.get("labels"))
        super().__init__(**kwargs)

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    def publish(self) -> None:
        self.published_at = datetime.now(UTC)

    def unpublish(self) -> None:
        self.published_at = None

    def add_label(self, label: str) -> None:
        """Append a label unless it is blank or already present."""
        label = (label or "").strip()
        current = list(self.labels or [])
        if not label or label in current:
            return
        # Reassign so the JSON column registers the change
        self.labels = [*current, label]

    def remove_label(self, label: str) -> None:
        label = (label or "").strip()
        self.labels = [existing for existing in (self.labels or []) if existing != label]

    def validation_errors(self) -> dict[str, str]:
        """Field errors that would make the post invalid; empty when valid."""
        errors = {}
        for field in ("title", "content", "author"):
            value = getattr(self, field)
            if value is None or not str(value).strip():
                errors[field] = "can't be blank"
        if self.title and len(self.title) > TITLE_MAX_LENGTH:
            errors["title"] = f"is too long (maximum is {TITLE_MAX_LENGTH} characters)"
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    @classmethod
    def published(cls) -> Select:
        """Query for published posts."""
        return select(cls).where(cls.published_at.is_not(None))

    @classmethod
    def recent(cls, query: Select | None = None) -> Select:
        """Order a post query newest first."""
        query = query if query is not None else select(cls)
        return query.order_by(cls.created_at.desc())

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.title!r}>"
