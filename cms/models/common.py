"""Shared model base, field checks, and response envelopes."""

import re
from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_ABSOLUTE_URL_RE = re.compile(r"^https?://[^\s/?#]+[^\s]*$", re.IGNORECASE)
# Root-relative path such as /blog-images/123-456.png ("//host" is not relative)
_ROOT_RELATIVE_RE = re.compile(r"^/(?!/)[^\s]*$")


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire.

    Input is accepted under either name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def blank_to_none(value: object) -> object:
    """Forms submit empty strings for untouched optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def check_not_blank(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def check_url(value: str | None, *, allow_relative: bool = False) -> str | None:
    """Accept absolute http(s) URLs and, optionally, root-relative paths."""
    if value is None:
        return None
    if _ABSOLUTE_URL_RE.match(value):
        return value
    if allow_relative and _ROOT_RELATIVE_RE.match(value):
        return value
    if allow_relative:
        raise ValueError("must be an http(s) URL or a path starting with /")
    raise ValueError("must be an http(s) URL")


def check_date(value: str | None) -> str | None:
    """Calendar date in YYYY-MM-DD form."""
    if value is None:
        return None
    if not DATE_PATTERN.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("Date is not a valid calendar date") from None
    return value


def check_patch_fields(
    model: BaseModel, non_nullable: frozenset[str]
) -> BaseModel:
    """Shared rules for partial-update schemas.

    A patch must set at least one field, and may only set ``null`` on
    columns that are nullable.
    """
    if not model.model_fields_set:
        raise ValueError("Update must include at least one field")
    nulled = sorted(
        name
        for name in model.model_fields_set & non_nullable
        if getattr(model, name) is None
    )
    if nulled:
        wire = ", ".join(to_camel(n) for n in nulled)
        raise ValueError(f"Fields cannot be null: {wire}")
    return model


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx produced by the API."""

    success: bool = False
    message: str
    errors: dict[str, list[str]] | None = None
