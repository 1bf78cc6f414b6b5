"""FastAPI application entry point for the posts blog."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docdrift.api.v1 import router as api_v1_router
from docdrift.core.config import settings
from docdrift.core.database import async_engine
from docdrift.schemas.common import ErrorResponse
from docdrift.services.posts import PostValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Blog API starting ({settings.app_env})")
    yield
    await async_engine.dispose()
    logger.info("Blog API stopped, database engine disposed")


app = FastAPI(
    title="docdrift blog API",
    description="Posts with drafts, publishing and labels",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


@app.exception_handler(PostValidationError)
async def post_validation_error_handler(request: Request, exc: PostValidationError) -> JSONResponse:
    """Model-level validation failures become 422 with per-field details."""
    error = ErrorResponse.from_field_errors("invalid_post", str(exc), exc.errors)
    return JSONResponse(status_code=422, content={"detail": error.model_dump()})


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "name": "docdrift blog API",
        "posts": f"{settings.api_v1_prefix}/posts",
        "docs": "/docs",
    }
