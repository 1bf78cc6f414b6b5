"""Blog post API endpoints.

Model validation failures raise PostValidationError, which the application
turns into a 422 response.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status

from docdrift.api.deps import DbSession
from docdrift.models.post import Post
from docdrift.schemas.post import PostCreate, PostResponse, PostUpdate
from docdrift.services.posts import PostService

router = APIRouter()


async def _get_post_or_404(service: PostService, post_id: UUID) -> Post:
    post = await service.get(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("", response_model=list[PostResponse])
async def list_posts(
    db: DbSession,
    published: bool = Query(False, description="Only list published posts"),
) -> list[Post]:
    """List posts, most recent first."""
    return await PostService(db).list_posts(published_only=published)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, db: DbSession) -> Post:
    """Create a draft post."""
    return await PostService(db).create(payload)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: UUID, db: DbSession) -> Post:
    return await _get_post_or_404(PostService(db), post_id)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(post_id: UUID, payload: PostUpdate, db: DbSession) -> Post:
    """Update the given fields of a post."""
    service = PostService(db)
    post = await _get_post_or_404(service, post_id)
    return await service.update(post, payload)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: UUID, db: DbSession) -> Response:
    service = PostService(db)
    post = await _get_post_or_404(service, post_id)
    await service.delete(post)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{post_id}/publish", response_model=PostResponse)
async def publish_post(post_id: UUID, db: DbSession) -> Post:
    """Publish a post now."""
    service = PostService(db)
    post = await _get_post_or_404(service, post_id)
    return await service.publish(post)


@router.patch("/{post_id}/unpublish", response_model=PostResponse)
async def unpublish_post(post_id: UUID, db: DbSession) -> Post:
    """Return a post to draft."""
    service = PostService(db)
    post = await _get_post_or_404(service, post_id)
    return await service.unpublish(post)
