"""Sample blog posts for local development.

Usage:
    python -m docdrift.db.seeds
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from docdrift.core.database import async_session_maker, init_db
from docdrift.models.post import Post

logger = logging.getLogger(__name__)


def sample_posts(now: datetime | None = None) -> list[Post]:
    """Two published posts and one draft."""
    now = now or datetime.now(UTC)
    return [
        Post(
            title="Welcome to Our Blog",
            content=(
                "This is our first blog post! We're excited to share our thoughts and ideas with you.\n\n"
                "This platform allows authors to write, edit, and publish posts with a simple and clean "
                "interface. You can create drafts and publish them when ready.\n\n"
                "Stay tuned for more exciting content!"
            ),
            author="Admin",
            published_at=now - timedelta(days=1),
            labels=["welcome", "announcement", "blog"],
        ),
        Post(
            title="Getting Started with FastAPI",
            content=(
                "FastAPI is a modern web framework for building APIs with Python type hints.\n\n"
                "Here are some key benefits of FastAPI:\n"
                "- Rapid development\n"
                "- Automatic request validation\n"
                "- Interactive API docs\n"
                "- Native async support\n\n"
                "Whether you're building a simple blog or a complex service, FastAPI provides the "
                "tools you need to get started quickly."
            ),
            author="Developer",
            published_at=now - timedelta(hours=2),
            labels=["fastapi", "tutorial", "programming", "web-development"],
        ),
        Post(
            title="Draft Post Example",
            content=(
                "This is an example of a draft post. It hasn't been published yet, so it won't be "
                "visible to regular visitors.\n\n"
                "Draft posts are useful for:\n"
                "- Working on content over time\n"
                "- Getting feedback before publishing\n"
                "- Scheduling future content\n\n"
                "You can easily publish this post when you're ready!"
            ),
            author="Content Writer",
            labels=["draft", "example"],
        ),
    ]


async def seed_posts(session: AsyncSession) -> list[Post]:
    """Insert the sample posts."""
    posts = sample_posts()
    session.add_all(posts)
    await session.commit()
    logger.info(f"Created {len(posts)} posts")
    return posts


async def main() -> None:
    await init_db()
    async with async_session_maker() as session:
        await seed_posts(session)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    asyncio.run(main())
