"""Image upload endpoints (multipart, field ``image``)."""

from fastapi import APIRouter, Depends, File, UploadFile

from cms.models.upload import BlogImageResponse, CaseStudyImageResponse
from cms.services.auth import require_admin
from cms.services.uploads import BLOG_IMAGES, CASE_STUDY_IMAGES, save_image

router = APIRouter(tags=["uploads"], dependencies=[Depends(require_admin)])


@router.post("/blog-images", response_model=BlogImageResponse)
async def upload_blog_image(image: UploadFile | None = File(default=None)):
    stored = await save_image(image, BLOG_IMAGES)
    return BlogImageResponse(url=stored.url, filename=stored.filename)


@router.post("/case-study-images", response_model=CaseStudyImageResponse)
async def upload_case_study_image(image: UploadFile | None = File(default=None)):
    stored = await save_image(image, CASE_STUDY_IMAGES)
    return CaseStudyImageResponse(image_url=stored.url)
