"""Authoring workflow: editor form state for blog posts and case studies.

A ``Draft`` holds unsaved form fields. While a new record's slug has not been
touched it follows the title; drafts opened from an existing record keep
their slug fixed. Local validation mirrors the server rules so most mistakes
are caught before submitting, and server field errors are attached to the
draft without discarding anything the author typed.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

from pydantic.alias_generators import to_camel

from cms.models.blog import BLOG_POST_CATEGORIES, BlogPost, BlogPostPreview
from cms.models.case_study import CaseStudy, CaseStudyPreview
from cms.models.common import DATE_PATTERN
from cms.services.rendering import render_blog_post, render_case_study

Kind = Literal["blog", "case-study"]

DEFAULT_BLOG_CATEGORY = "AI & Technology"

_NON_ALNUM_RUN_RE = re.compile(r"[^a-z0-9]+")

FORM_FIELDS: dict[str, tuple[str, ...]] = {
    "blog": (
        "title",
        "slug",
        "excerpt",
        "content",
        "author",
        "category",
        "image",
        "linkedin_url",
        "featured",
        "published",
        "date",
    ),
    "case-study": (
        "slug",
        "title",
        "client",
        "category",
        "challenge",
        "approach",
        "impact",
        "role_description",
        "featured",
        "tree_house_attribution",
        "image",
    ),
}

REQUIRED_FIELDS: dict[str, dict[str, str]] = {
    "blog": {
        "title": "Title is required",
        "slug": "Slug is required",
        "excerpt": "Excerpt is required",
        "content": "Content is required",
        "author": "Author is required",
        "category": "Category is required",
        "date": "Date is required",
    },
    "case-study": {
        "title": "Title is required",
        "slug": "Slug is required",
        "category": "Category is required",
        "challenge": "Challenge is required",
        "approach": "Approach is required",
        "impact": "Impact is required",
        "role_description": "Role is required",
    },
}


def slugify(title: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to one hyphen, trim hyphens."""
    return _NON_ALNUM_RUN_RE.sub("-", title.lower()).strip("-")


class ImmutableFieldError(ValueError):
    """Raised when an editor tries to change a field that is fixed."""


@dataclass
class Draft:
    """Unsaved editor state for one blog post or case study."""

    kind: Kind
    fields: dict[str, Any]
    record_id: str | None = None
    slug_locked: bool = False
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def editing(self) -> bool:
        return self.record_id is not None

    def set_field(self, name: str, value: Any) -> None:
        if name not in FORM_FIELDS[self.kind]:
            raise KeyError(f"{self.kind} drafts have no field {name!r}")

        if name == "slug":
            if self.editing and value != self.fields.get("slug"):
                raise ImmutableFieldError(
                    "The slug cannot be changed once the record exists"
                )
            # Manual edit: stop following the title from now on
            self.slug_locked = True

        self.fields[name] = value
        self.errors.pop(name, None)

        if name == "title" and not self.slug_locked:
            self.fields["slug"] = slugify(value or "")
            self.errors.pop("slug", None)

    def set_title(self, title: str) -> None:
        self.set_field("title", title)

    def validate(self) -> dict[str, str]:
        """Run the local checks; returns (and stores) field -> message."""
        errors: dict[str, str] = {}
        for name, message in REQUIRED_FIELDS[self.kind].items():
            value = self.fields.get(name)
            if not isinstance(value, str) or not value.strip():
                errors[name] = message

        if self.kind == "blog":
            if "date" not in errors and not DATE_PATTERN.match(self.fields["date"]):
                errors["date"] = "Date must be in YYYY-MM-DD format"
            if (
                "category" not in errors
                and self.fields["category"] not in BLOG_POST_CATEGORIES
            ):
                errors["category"] = "Choose a category from the list"

        self.errors = errors
        return dict(errors)

    def apply_server_errors(self, field_errors: dict[str, list[str]]) -> None:
        """Attach server-reported errors; entered values are left untouched."""
        by_wire_name = {to_camel(name): name for name in FORM_FIELDS[self.kind]}
        self.errors = {
            by_wire_name.get(key, key): "; ".join(messages)
            for key, messages in field_errors.items()
        }

    def payload(self) -> dict[str, Any]:
        """Request body for create/update, with camelCase keys."""
        return {to_camel(name): value for name, value in self.fields.items()}

    def preview_html(self) -> str:
        """Render the unsaved draft through the public page template."""
        if self.kind == "blog":
            return render_blog_post(
                BlogPostPreview.model_validate(self.fields), preview=True
            )
        return render_case_study(
            CaseStudyPreview.model_validate(self.fields), preview=True
        )


def new_blog_post_draft(today: date | None = None) -> Draft:
    fields = {name: "" for name in FORM_FIELDS["blog"]}
    fields.update(
        category=DEFAULT_BLOG_CATEGORY,
        image=None,
        linkedin_url=None,
        featured=False,
        published=False,
        date=(today or date.today()).isoformat(),
    )
    return Draft("blog", fields)


def edit_blog_post_draft(post: BlogPost) -> Draft:
    fields = post.model_dump(include=set(FORM_FIELDS["blog"]))
    return Draft("blog", fields, record_id=post.id, slug_locked=True)


def new_case_study_draft() -> Draft:
    fields = {name: "" for name in FORM_FIELDS["case-study"]}
    fields.update(featured=False, tree_house_attribution=False, image=None)
    return Draft("case-study", fields)


def edit_case_study_draft(case_study: CaseStudy) -> Draft:
    fields = case_study.model_dump(include=set(FORM_FIELDS["case-study"]))
    return Draft("case-study", fields, record_id=case_study.id, slug_locked=True)
