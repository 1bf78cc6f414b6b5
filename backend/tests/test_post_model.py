"""Tests for the Post model."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from docdrift.db.seeds import sample_posts, seed_posts
from docdrift.models.post import TITLE_MAX_LENGTH, Post, normalize_labels


def _post(**overrides):
    fields = {"title": "Hello", "content": "Body", "author": "Ada"}
    fields.update(overrides)
    return Post(**fields)


class TestNormalizeLabels:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, []),
            ("", []),
            ("ruby, rails ,  ,web", ["ruby", "rails", "web"]),
            (["  a ", "", None, "b"], ["a", "b"]),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_labels(value) == expected


class TestPostValidation:
    def test_valid_post(self):
        assert _post().is_valid()

    @pytest.mark.parametrize("field", ["title", "content", "author"])
    def test_blank_fields(self, field):
        post = _post(**{field: "   "})
        assert post.validation_errors() == {field: "can't be blank"}

    def test_missing_fields(self):
        errors = Post().validation_errors()
        assert set(errors) == {"title", "content", "author"}

    def test_title_too_long(self):
        post = _post(title="x" * (TITLE_MAX_LENGTH + 1))
        assert "too long" in post.validation_errors()["title"]


class TestPublishing:
    def test_new_post_is_draft(self):
        assert not _post().is_published

    def test_publish_and_unpublish(self):
        post = _post()
        post.publish()
        assert post.is_published
        assert post.published_at.tzinfo is not None

        post.unpublish()
        assert post.published_at is None


class TestLabels:
    def test_labels_normalized_on_init(self):
        assert _post(labels="news, , tips").labels == ["news", "tips"]

    def test_no_labels_is_empty_list(self):
        assert _post().labels == []

    def test_add_label_ignores_blank_and_duplicates(self):
        post = _post(labels=["news"])
        post.add_label(" tips ")
        post.add_label("news")
        post.add_label("  ")
        assert post.labels == ["news", "tips"]

    def test_remove_label(self):
        post = _post(labels=["news", "tips"])
        post.remove_label("news")
        post.remove_label("missing")
        assert post.labels == ["tips"]


class TestQueries:
    @pytest.mark.asyncio
    async def test_published_and_recent(self, db_session):
        now = datetime.now(UTC)
        old = _post(title="Old", published_at=now - timedelta(days=2))
        old.created_at = now - timedelta(days=2)
        new = _post(title="New", published_at=now)
        new.created_at = now
        draft = _post(title="Draft")
        draft.created_at = now - timedelta(days=1)
        db_session.add_all([old, new, draft])
        await db_session.commit()

        published = (await db_session.execute(Post.recent(Post.published()))).scalars().all()
        everything = (await db_session.execute(Post.recent())).scalars().all()

        assert [p.title for p in published] == ["New", "Old"]
        assert [p.title for p in everything] == ["New", "Draft", "Old"]

    @pytest.mark.asyncio
    async def test_labels_persist(self, db_session):
        post = _post(labels=["a", "b"])
        db_session.add(post)
        await db_session.commit()

        loaded = (await db_session.execute(select(Post))).scalar_one()
        assert loaded.labels == ["a", "b"]


class TestSeeds:
    def test_sample_posts(self):
        posts = sample_posts()
        assert len(posts) == 3
        assert sum(p.is_published for p in posts) == 2
        assert all(p.is_valid() for p in posts)

    @pytest.mark.asyncio
    async def test_seed_posts(self, db_session):
        await seed_posts(db_session)
        count = len((await db_session.execute(select(Post))).scalars().all())
        assert count == 3
