"""Blog post persistence."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docdrift.models.post import Post
from docdrift.schemas.post import PostCreate, PostUpdate

logger = logging.getLogger(__name__)


class PostValidationError(Exception):
    """Raised when a post would be saved in an invalid state."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        message = ", ".join(f"{field} {msg}" for field, msg in errors.items())
        super().__init__(message)


class PostService:
    """CRUD and publishing operations for posts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_posts(self, published_only: bool = False) -> list[Post]:
        """Posts, newest first."""
        query = Post.published() if published_only else select(Post)
        result = await self.db.execute(Post.recent(query))
        return list(result.scalars().all())

    async def get(self, post_id: uuid.UUID) -> Post | None:
        return await self.db.get(Post, post_id)

    async def create(self, data: PostCreate) -> Post:
        post = Post(**data.model_dump())
        return await self._save(post)

    async def update(self, post: Post, data: PostUpdate) -> Post:
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "labels" and value is None:
                value = []
            setattr(post, field, value)
        return await self._save(post)

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.commit()
        logger.info(f"Deleted post {post.id}")

    async def publish(self, post: Post) -> Post:
        post.publish()
        return await self._save(post)

    async def unpublish(self, post: Post) -> Post:
        post.unpublish()
        return await self._save(post)

    async def _save(self, post: Post) -> Post:
        errors = post.validation_errors()
        if errors:
            # Drop pending changes so the session stays usable
            if post in self.db:
                await self.db.refresh(post)
            raise PostValidationError(errors)

        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)
        return post
