"""SQLAlchemy models."""

from docdrift.models.post import Post

__all__ = [
    "Post",
]
