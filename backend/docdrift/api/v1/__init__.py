"""API v1 module."""

from fastapi import APIRouter

from docdrift.api.v1 import health, posts

router = APIRouter()

router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
