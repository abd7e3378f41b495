"""Tests for the storage gateway (stores run against in-memory SQLite)."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from cms.models.blog import BlogPostCreate, BlogPostUpdate
from cms.models.case_study import CaseStudyCreate, CaseStudyUpdate
from cms.models.contact import ContactSubmission
from cms.services.errors import (
    ContentValidationError,
    StorageError,
    UniqueConstraintViolation,
)
from cms.services.storage import (
    BlogPostStore,
    CaseStudyStore,
    ContactStore,
    is_valid_id,
    next_timestamp,
)


def _post(**overrides):
    data = {
        "title": "Hello",
        "slug": "hello",
        "excerpt": "Short",
        "content": "<p>Body</p>",
        "author": "Alex",
        "category": "Leadership",
        "date": "2025-02-03",
    }
    data.update(overrides)
    return BlogPostCreate.model_validate(data)


def _case_study(**overrides):
    data = {
        "slug": "acme",
        "title": "Acme",
        "client": "Acme Ltd",
        "category": "Transformation",
        "challenge": "c",
        "approach": "a",
        "impact": "i",
        "role_description": "r",
    }
    data.update(overrides)
    return CaseStudyCreate.model_validate(data)


def test_next_timestamp_strictly_advances():
    future = datetime.now(timezone.utc) + timedelta(seconds=5)

    assert next_timestamp(future) == future + timedelta(microseconds=1)
    assert next_timestamp(None) <= datetime.now(timezone.utc)


def test_is_valid_id():
    assert is_valid_id(str(uuid.uuid4()))
    assert not is_valid_id("42")
    assert not is_valid_id("")


async def test_create_and_read_back(db_engine):
    store = BlogPostStore(db_engine)

    created = await store.create(_post())

    assert created.created_at.tzinfo is not None
    assert created.created_at == created.updated_at
    assert await store.get_by_id(created.id) == created
    assert await store.get_by_slug("hello") == created
    assert await store.get_by_slug("missing") is None
    assert await store.get_by_id(str(uuid.uuid4())) is None


async def test_create_falls_back_without_returning(db_engine, mocker):
    mocker.patch.object(db_engine.dialect, "insert_returning", False)
    mocker.patch.object(db_engine.dialect, "update_returning", False)
    store = BlogPostStore(db_engine)

    created = await store.create(_post())
    updated = await store.update(
        created.id, BlogPostUpdate.model_validate({"excerpt": "Longer"})
    )

    assert created.slug == "hello"
    assert updated.excerpt == "Longer"
    assert updated.updated_at > created.updated_at


async def test_duplicate_slug_raises_unique_violation(db_engine):
    store = BlogPostStore(db_engine)
    await store.create(_post())

    with pytest.raises(UniqueConstraintViolation) as exc_info:
        await store.create(_post(title="Other"))

    assert exc_info.value.field == "slug"
    assert isinstance(exc_info.value, StorageError)
    assert len(await store.list_all()) == 1


async def test_update_applies_only_set_fields(db_engine):
    store = BlogPostStore(db_engine)
    created = await store.create(_post())

    updated = await store.update(
        created.id, BlogPostUpdate.model_validate({"title": "Renamed"})
    )

    assert updated.title == "Renamed"
    assert updated.updated_at > created.updated_at
    assert updated.model_dump(exclude={"title", "updated_at"}) == created.model_dump(
        exclude={"title", "updated_at"}
    )


async def test_update_unknown_id_returns_none(db_engine):
    store = BlogPostStore(db_engine)

    changes = BlogPostUpdate.model_validate({"title": "x"})
    assert await store.update(str(uuid.uuid4()), changes) is None
    assert await store.update("nope", changes) is None


async def test_blog_slug_may_change(db_engine):
    store = BlogPostStore(db_engine)
    created = await store.create(_post())

    updated = await store.update(
        created.id, BlogPostUpdate.model_validate({"slug": "hello-again"})
    )

    assert updated.slug == "hello-again"
    assert await store.get_by_slug("hello") is None


async def test_case_study_slug_is_immutable(db_engine):
    store = CaseStudyStore(db_engine)
    created = await store.create(_case_study())

    with pytest.raises(ContentValidationError) as exc_info:
        await store.update(created.id, CaseStudyUpdate.model_validate({"slug": "new"}))
    assert "slug" in exc_info.value.field_errors

    same = await store.update(
        created.id, CaseStudyUpdate.model_validate({"slug": "acme", "impact": "more"})
    )
    assert same.slug == "acme"
    assert same.impact == "more"


async def test_list_filters_and_order(db_engine):
    store = BlogPostStore(db_engine)
    first = await store.create(_post(slug="a"))
    second = await store.create(_post(slug="b", featured=True, published=True))

    assert [p.id for p in await store.list_all()] == [second.id, first.id]
    assert [p.id for p in await store.list_all(featured=True)] == [second.id]
    assert [p.id for p in await store.list_all(published=False)] == [first.id]
    assert await store.list_all(category="Strategy") == []


async def test_delete(db_engine):
    store = CaseStudyStore(db_engine)
    created = await store.create(_case_study())

    assert await store.delete(created.id) is True
    assert await store.delete(created.id) is False
    assert await store.delete("not-a-uuid") is False
    assert await store.get_by_id(created.id) is None


async def test_delete_returns_false_on_storage_failure(db_engine, mocker):
    store = BlogPostStore(db_engine)
    mocker.patch.object(
        type(db_engine),
        "begin",
        side_effect=OperationalError("DELETE", {}, Exception("disk I/O error")),
    )

    assert await store.delete(str(uuid.uuid4())) is False


async def test_list_wraps_driver_errors(db_engine, mocker):
    store = BlogPostStore(db_engine)
    mocker.patch.object(
        type(db_engine),
        "connect",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    )

    with pytest.raises(StorageError):
        await store.list_all()


async def test_contact_store(db_engine):
    store = ContactStore(db_engine)
    submission = ContactSubmission.model_validate(
        {"name": "Jo", "email": "jo@example.com", "message": "Hi", "company": ""}
    )

    contact = await store.create(submission)

    assert contact.company is None
    assert contact.created_at.tzinfo is not None
    assert await store.list_all() == [contact]
