"""Blog post data models."""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator, model_validator

from cms.models.common import (
    SLUG_PATTERN,
    CamelModel,
    blank_to_none,
    check_date,
    check_not_blank,
    check_patch_fields,
    check_url,
)

BLOG_POST_CATEGORIES = (
    "AI & Technology",
    "Digital Transformation",
    "Leadership",
    "Strategy",
    "Innovation",
    "Industry Insights",
)

_REQUIRED_TEXT = ("title", "excerpt", "content", "author")
_NON_NULLABLE = frozenset(
    {*_REQUIRED_TEXT, "slug", "category", "date", "featured", "published"}
)


def _check_category(value: str | None) -> str | None:
    if value is not None and value not in BLOG_POST_CATEGORIES:
        allowed = ", ".join(BLOG_POST_CATEGORIES)
        raise ValueError(f"Category must be one of: {allowed}")
    return value


def _check_image(value: str | None) -> str | None:
    return check_url(value, allow_relative=True)


class BlogPostCreate(CamelModel):
    """Insert schema. Server-managed fields (id, timestamps) are ignored."""

    title: str = Field(..., max_length=500)
    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=255)
    excerpt: str
    content: str
    author: str = Field(..., max_length=200)
    category: str
    image: str | None = None
    linkedin_url: str | None = None
    featured: bool = False
    published: bool = False
    date: str

    blank_optional_urls = field_validator("image", "linkedin_url", mode="before")(
        blank_to_none
    )
    required_text_not_blank = field_validator(*_REQUIRED_TEXT)(check_not_blank)
    category_allowed = field_validator("category")(_check_category)
    image_url_valid = field_validator("image")(_check_image)
    linkedin_url_valid = field_validator("linkedin_url")(check_url)
    date_valid = field_validator("date")(check_date)


class BlogPostUpdate(CamelModel):
    """Partial-update schema: only the fields present are changed."""

    title: str | None = Field(None, max_length=500)
    slug: str | None = Field(None, pattern=SLUG_PATTERN, max_length=255)
    excerpt: str | None = None
    content: str | None = None
    author: str | None = Field(None, max_length=200)
    category: str | None = None
    image: str | None = None
    linkedin_url: str | None = None
    featured: bool | None = None
    published: bool | None = None
    date: str | None = None

    blank_optional_urls = field_validator("image", "linkedin_url", mode="before")(
        blank_to_none
    )
    required_text_not_blank = field_validator(*_REQUIRED_TEXT)(check_not_blank)
    category_allowed = field_validator("category")(_check_category)
    image_url_valid = field_validator("image")(_check_image)
    linkedin_url_valid = field_validator("linkedin_url")(check_url)
    date_valid = field_validator("date")(check_date)

    @model_validator(mode="after")
    def check_patch(self) -> "BlogPostUpdate":
        check_patch_fields(self, _NON_NULLABLE)
        return self


class BlogPost(CamelModel):
    """A stored blog post as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    title: str
    excerpt: str
    content: str
    author: str
    category: str
    image: str | None = None
    linkedin_url: str | None = None
    featured: bool = False
    published: bool = False
    date: str
    created_at: datetime
    updated_at: datetime


class BlogPostPreview(CamelModel):
    """Unsaved draft rendered through the public template. Nothing is required."""

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    author: str = ""
    category: str = ""
    image: str | None = None
    linkedin_url: str | None = None
    date: str = ""

    blank_optional_urls = field_validator("image", "linkedin_url", mode="before")(
        blank_to_none
    )


class BlogPostResponse(CamelModel):
    success: bool = True
    post: BlogPost
