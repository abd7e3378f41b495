"""Contact form models."""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from cms.models.common import CamelModel, blank_to_none, check_not_blank


class ContactSubmission(CamelModel):
    """Public contact form submission."""

    name: str = Field(..., max_length=200)
    email: str = Field(
        ..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )
    company: str | None = Field(None, max_length=200)
    message: str = Field(..., max_length=5000)

    blank_company = field_validator("company", mode="before")(blank_to_none)
    required_text_not_blank = field_validator("name", "message")(check_not_blank)


class Contact(CamelModel):
    """A stored contact submission."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    company: str | None = None
    message: str
    created_at: datetime


class ContactResponse(CamelModel):
    success: bool = True
    contact: Contact
