"""Image upload response models."""

from cms.models.common import CamelModel


class BlogImageResponse(CamelModel):
    success: bool = True
    url: str
    filename: str


class CaseStudyImageResponse(CamelModel):
    success: bool = True
    image_url: str
    message: str = "Image uploaded successfully"
