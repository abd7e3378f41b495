"""Blog post endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import HTMLResponse

from cms.models.blog import (
    BlogPost,
    BlogPostCreate,
    BlogPostPreview,
    BlogPostResponse,
    BlogPostUpdate,
)
from cms.models.common import DeleteResponse
from cms.services.auth import require_admin
from cms.services.errors import NotFoundError
from cms.services.rendering import render_blog_post
from cms.services.storage import BlogPostStore, get_blog_post_store
from cms.services.validation import validate

router = APIRouter(prefix="/blog-posts", tags=["blog"])

INVALID_DATA = "Invalid blog post data"
NOT_FOUND = "Blog post not found"


@router.get("", response_model=list[BlogPost])
async def list_blog_posts(
    published: bool | None = Query(default=None, description="Only (un)published posts"),
    featured: bool | None = Query(default=None, description="Only (un)featured posts"),
    category: str | None = Query(default=None, description="Exact category match"),
    store: BlogPostStore = Depends(get_blog_post_store),
):
    """All blog posts, newest first."""
    return await store.list_all(
        published=published, featured=featured, category=category
    )


@router.post(
    "",
    status_code=201,
    response_model=BlogPostResponse,
    dependencies=[Depends(require_admin)],
)
async def create_blog_post(
    payload: dict[str, Any] = Body(...),
    store: BlogPostStore = Depends(get_blog_post_store),
):
    """Create a blog post. Duplicate slugs are rejected with 409."""
    fields = validate(BlogPostCreate, payload, message=INVALID_DATA)
    post = await store.create(fields)
    return BlogPostResponse(post=post)


@router.post(
    "/preview",
    response_class=HTMLResponse,
    dependencies=[Depends(require_admin)],
)
async def preview_blog_post(payload: dict[str, Any] = Body(...)):
    """Render an unsaved draft through the public page template."""
    draft = validate(BlogPostPreview, payload, message="Invalid preview data")
    return HTMLResponse(content=render_blog_post(draft, preview=True))


@router.get("/by-id/{post_id}", response_model=BlogPost)
async def get_blog_post_by_id(
    post_id: str, store: BlogPostStore = Depends(get_blog_post_store)
):
    """Get a single blog post by id (used by the editor)."""
    post = await store.get_by_id(post_id)
    if post is None:
        raise NotFoundError(NOT_FOUND)
    return post


@router.get("/{slug}", response_model=BlogPost)
async def get_blog_post(slug: str, store: BlogPostStore = Depends(get_blog_post_store)):
    """Get a single blog post by its slug."""
    post = await store.get_by_slug(slug)
    if post is None:
        raise NotFoundError(NOT_FOUND)
    return post


@router.api_route(
    "/{post_id}",
    methods=["PATCH", "PUT"],
    response_model=BlogPostResponse,
    dependencies=[Depends(require_admin)],
)
async def update_blog_post(
    post_id: str,
    payload: dict[str, Any] = Body(...),
    store: BlogPostStore = Depends(get_blog_post_store),
):
    """Partially update a blog post; only the supplied fields change."""
    changes = validate(BlogPostUpdate, payload, message=INVALID_DATA)
    post = await store.update(post_id, changes)
    if post is None:
        raise NotFoundError(NOT_FOUND)
    return BlogPostResponse(post=post)


@router.delete(
    "/{post_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_blog_post(
    post_id: str, store: BlogPostStore = Depends(get_blog_post_store)
):
    if not await store.delete(post_id):
        raise NotFoundError(NOT_FOUND)
    return DeleteResponse(message="Blog post deleted successfully")
