"""Storage gateway: CRUD per entity against the relational store.

Each public method runs in its own transaction. Writes use
INSERT/UPDATE ... RETURNING when the dialect supports it and otherwise fall
back to re-selecting the row by id inside the same transaction.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from cms.models.blog import BlogPost
from cms.models.case_study import CaseStudy
from cms.models.contact import Contact
from cms.services.database import BlogPostRow, CaseStudyRow, ContactRow, get_engine
from cms.services.errors import (
    ContentValidationError,
    StorageError,
    UniqueConstraintViolation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None) -> datetime:
    """Current time, nudged forward so it is strictly after *previous*."""
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def is_valid_id(record_id: str) -> bool:
    try:
        uuid.UUID(record_id)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


class RecordStore(Generic[T]):
    """Create/list/get/delete for one table, materialized as *record_class*."""

    entity_name = "record"

    def __init__(
        self,
        table: Table,
        record_class: type[T],
        engine: AsyncEngine | None = None,
    ) -> None:
        self.table = table
        self.record_class = record_class
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine or get_engine()

    def _to_record(self, row: Any) -> T:
        return self.record_class.model_validate(dict(row))

    async def _select_one(self, conn: AsyncConnection, column: str, value: Any):
        stmt = select(self.table).where(self.table.c[column] == value)
        result = await conn.execute(stmt)
        return result.mappings().first()

    async def list_all(self, **filters: Any) -> list[T]:
        """All records, newest first. ``None`` filter values are ignored."""
        stmt = select(self.table).order_by(
            self.table.c.created_at.desc(), self.table.c.id.desc()
        )
        for column, value in filters.items():
            if value is not None:
                stmt = stmt.where(self.table.c[column] == value)
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list %s records: %s", self.entity_name, exc)
            raise StorageError(f"Failed to list {self.entity_name} records") from exc
        return [self._to_record(r) for r in rows]

    async def get_by_id(self, record_id: str) -> T | None:
        if not is_valid_id(record_id):
            return None
        try:
            async with self.engine.connect() as conn:
                row = await self._select_one(conn, "id", record_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to read %s %s: %s", self.entity_name, record_id, exc)
            raise StorageError(f"Failed to read {self.entity_name}") from exc
        return self._to_record(row) if row else None

    async def create(self, fields: BaseModel) -> T:
        """Insert a record; the store assigns ``id`` and the timestamps."""
        values = fields.model_dump()
        values["id"] = str(uuid.uuid4())
        now = utcnow()
        values["created_at"] = now
        if "updated_at" in self.table.c:
            values["updated_at"] = now

        try:
            async with self.engine.begin() as conn:
                stmt = insert(self.table).values(**values)
                if conn.dialect.insert_returning:
                    result = await conn.execute(stmt.returning(*self.table.c))
                    row = result.mappings().one()
                else:
                    await conn.execute(stmt)
                    row = await self._select_one(conn, "id", values["id"])
        except IntegrityError as exc:
            logger.warning(
                "Duplicate %s rejected (slug=%s)", self.entity_name, values.get("slug")
            )
            raise UniqueConstraintViolation("slug", values.get("slug")) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create %s: %s", self.entity_name, exc)
            raise StorageError(f"Failed to create {self.entity_name}") from exc

        logger.info("Created %s %s", self.entity_name, values["id"])
        return self._to_record(row)

    async def delete(self, record_id: str) -> bool:
        """Delete by id. True iff a row was removed; storage failures map to False."""
        if not is_valid_id(record_id):
            return False
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(
                    delete(self.table).where(self.table.c.id == record_id)
                )
                removed = (result.rowcount or 0) > 0
        except SQLAlchemyError:
            logger.exception("Failed to delete %s %s", self.entity_name, record_id)
            return False
        if removed:
            logger.info("Deleted %s %s", self.entity_name, record_id)
        return removed


class ContentStore(RecordStore[T]):
    """Slug-addressed content with partial updates."""

    async def get_by_slug(self, slug: str) -> T | None:
        try:
            async with self.engine.connect() as conn:
                row = await self._select_one(conn, "slug", slug)
        except SQLAlchemyError as exc:
            logger.error("Failed to read %s %r: %s", self.entity_name, slug, exc)
            raise StorageError(f"Failed to read {self.entity_name}") from exc
        return self._to_record(row) if row else None

    def check_update(self, current: dict[str, Any], changes: dict[str, Any]) -> None:
        """Hook for entity-specific update rules; may edit *changes* in place."""

    async def update(self, record_id: str, changes: BaseModel) -> T | None:
        """Apply only the fields set on *changes*; None if the id is unknown."""
        if not is_valid_id(record_id):
            return None
        values = changes.model_dump(exclude_unset=True)

        try:
            async with self.engine.begin() as conn:
                current = await self._select_one(conn, "id", record_id)
                if current is None:
                    return None
                self.check_update(dict(current), values)
                values["updated_at"] = next_timestamp(current["updated_at"])

                stmt = (
                    update(self.table)
                    .where(self.table.c.id == record_id)
                    .values(**values)
                )
                if conn.dialect.update_returning:
                    result = await conn.execute(stmt.returning(*self.table.c))
                    row = result.mappings().one()
                else:
                    await conn.execute(stmt)
                    row = await self._select_one(conn, "id", record_id)
        except IntegrityError as exc:
            logger.warning(
                "Duplicate %s slug rejected on update (slug=%s)",
                self.entity_name,
                values.get("slug"),
            )
            raise UniqueConstraintViolation("slug", values.get("slug")) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to update %s %s: %s", self.entity_name, record_id, exc)
            raise StorageError(f"Failed to update {self.entity_name}") from exc

        logger.info("Updated %s %s", self.entity_name, record_id)
        return self._to_record(row)


class BlogPostStore(ContentStore[BlogPost]):
    entity_name = "blog post"

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        super().__init__(BlogPostRow.__table__, BlogPost, engine)


class CaseStudyStore(ContentStore[CaseStudy]):
    entity_name = "case study"

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        super().__init__(CaseStudyRow.__table__, CaseStudy, engine)

    def check_update(self, current: dict[str, Any], changes: dict[str, Any]) -> None:
        """The slug is fixed once a case study exists."""
        new_slug = changes.get("slug")
        if new_slug is None:
            return
        if new_slug != current["slug"]:
            raise ContentValidationError(
                "Invalid case study data",
                {"slug": ["Slug cannot be changed after creation"]},
            )
        del changes["slug"]


class ContactStore(RecordStore[Contact]):
    entity_name = "contact"

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        super().__init__(ContactRow.__table__, Contact, engine)


def get_blog_post_store() -> BlogPostStore:
    return BlogPostStore()


def get_case_study_store() -> CaseStudyStore:
    return CaseStudyStore()


def get_contact_store() -> ContactStore:
    return ContactStore()
