"""Public HTML pages for blog posts and case studies."""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from cms.services.errors import NotFoundError
from cms.services.rendering import render_blog_post, render_case_study
from cms.services.storage import (
    BlogPostStore,
    CaseStudyStore,
    get_blog_post_store,
    get_case_study_store,
)

router = APIRouter(tags=["pages"])


@router.get("/blog/{slug}", response_class=HTMLResponse)
async def blog_post_page(
    slug: str, store: BlogPostStore = Depends(get_blog_post_store)
):
    """Published posts only; drafts are visible through the preview endpoint."""
    post = await store.get_by_slug(slug)
    if post is None or not post.published:
        raise NotFoundError("Blog post not found")
    return HTMLResponse(content=render_blog_post(post))


@router.get("/work/{slug}", response_class=HTMLResponse)
async def case_study_page(
    slug: str, store: CaseStudyStore = Depends(get_case_study_store)
):
    case_study = await store.get_by_slug(slug)
    if case_study is None:
        raise NotFoundError("Case study not found")
    return HTMLResponse(content=render_case_study(case_study))
