"""Case study data models."""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator, model_validator

from cms.models.common import (
    SLUG_PATTERN,
    CamelModel,
    blank_to_none,
    check_not_blank,
    check_patch_fields,
    check_url,
)

_REQUIRED_TEXT = (
    "title",
    "category",
    "challenge",
    "approach",
    "impact",
    "role_description",
)
_NON_NULLABLE = frozenset({*_REQUIRED_TEXT, "slug", "client", "featured"})


def _coerce_attribution(value: object) -> object:
    """The editor sends a checkbox; older records carry free text."""
    if value is True:
        return "true"
    if value is False:
        return None
    return blank_to_none(value)


def _check_image(value: str | None) -> str | None:
    return check_url(value, allow_relative=True)


class CaseStudyCreate(CamelModel):
    """Insert schema. Server-managed fields (id, timestamps) are ignored."""

    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=255)
    title: str
    client: str = Field(..., max_length=200)
    category: str = Field(..., max_length=200)
    challenge: str
    approach: str
    impact: str
    role_description: str
    featured: bool = False
    tree_house_attribution: str | None = None
    image: str | None = None

    attribution_flag = field_validator("tree_house_attribution", mode="before")(
        _coerce_attribution
    )
    blank_optional_image = field_validator("image", mode="before")(blank_to_none)
    required_text_not_blank = field_validator(*_REQUIRED_TEXT)(check_not_blank)
    image_url_valid = field_validator("image")(_check_image)


class CaseStudyUpdate(CamelModel):
    """Partial-update schema: only the fields present are changed.

    ``slug`` is accepted so editors can resend the whole form, but the store
    refuses any value that differs from the stored one.
    """

    slug: str | None = Field(None, pattern=SLUG_PATTERN, max_length=255)
    title: str | None = None
    client: str | None = Field(None, max_length=200)
    category: str | None = Field(None, max_length=200)
    challenge: str | None = None
    approach: str | None = None
    impact: str | None = None
    role_description: str | None = None
    featured: bool | None = None
    tree_house_attribution: str | None = None
    image: str | None = None

    attribution_flag = field_validator("tree_house_attribution", mode="before")(
        _coerce_attribution
    )
    blank_optional_image = field_validator("image", mode="before")(blank_to_none)
    required_text_not_blank = field_validator(*_REQUIRED_TEXT)(check_not_blank)
    image_url_valid = field_validator("image")(_check_image)

    @model_validator(mode="after")
    def check_patch(self) -> "CaseStudyUpdate":
        check_patch_fields(self, _NON_NULLABLE)
        return self


class CaseStudy(CamelModel):
    """A stored case study as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    title: str
    client: str
    category: str
    challenge: str
    approach: str
    impact: str
    role_description: str
    featured: bool = False
    tree_house_attribution: str | None = None
    image: str | None = None
    created_at: datetime
    updated_at: datetime


class CaseStudyPreview(CamelModel):
    """Unsaved draft rendered through the public template."""

    title: str = ""
    slug: str = ""
    client: str = ""
    category: str = ""
    challenge: str = ""
    approach: str = ""
    impact: str = ""
    role_description: str = ""
    tree_house_attribution: str | None = None
    image: str | None = None

    attribution_flag = field_validator("tree_house_attribution", mode="before")(
        _coerce_attribution
    )
    blank_optional_image = field_validator("image", mode="before")(blank_to_none)


class CaseStudyResponse(CamelModel):
    success: bool = True
    case_study: CaseStudy
