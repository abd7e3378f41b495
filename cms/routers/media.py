"""Serve uploaded images from the public upload directories."""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from cms.services.errors import NotFoundError
from cms.services.uploads import BLOG_IMAGES, CASE_STUDY_IMAGES, resolve_image

router = APIRouter(tags=["media"])


def _serve(kind: str, filename: str) -> FileResponse:
    path = resolve_image(kind, filename)
    if path is None:
        raise NotFoundError("Image not found")
    return FileResponse(path, headers={"Cache-Control": "public, max-age=31536000"})


@router.get("/blog-images/{filename}")
async def get_blog_image(filename: str):
    return _serve(BLOG_IMAGES, filename)


@router.get("/case-study-images/{filename}")
async def get_case_study_image(filename: str):
    return _serve(CASE_STUDY_IMAGES, filename)
