"""Case study endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import HTMLResponse

from cms.models.case_study import (
    CaseStudy,
    CaseStudyCreate,
    CaseStudyPreview,
    CaseStudyResponse,
    CaseStudyUpdate,
)
from cms.models.common import DeleteResponse
from cms.services.auth import require_admin
from cms.services.errors import NotFoundError
from cms.services.rendering import render_case_study
from cms.services.storage import CaseStudyStore, get_case_study_store
from cms.services.validation import validate

router = APIRouter(prefix="/case-studies", tags=["case-studies"])

INVALID_DATA = "Invalid case study data"
NOT_FOUND = "Case study not found"


@router.get("", response_model=list[CaseStudy])
async def list_case_studies(
    featured: bool | None = Query(default=None),
    category: str | None = Query(default=None),
    store: CaseStudyStore = Depends(get_case_study_store),
):
    """All case studies, newest first."""
    return await store.list_all(featured=featured, category=category)


@router.post(
    "",
    status_code=201,
    response_model=CaseStudyResponse,
    dependencies=[Depends(require_admin)],
)
async def create_case_study(
    payload: dict[str, Any] = Body(...),
    store: CaseStudyStore = Depends(get_case_study_store),
):
    fields = validate(CaseStudyCreate, payload, message=INVALID_DATA)
    case_study = await store.create(fields)
    return CaseStudyResponse(case_study=case_study)


@router.post(
    "/preview",
    response_class=HTMLResponse,
    dependencies=[Depends(require_admin)],
)
async def preview_case_study(payload: dict[str, Any] = Body(...)):
    """Render an unsaved draft through the public page template."""
    draft = validate(CaseStudyPreview, payload, message="Invalid preview data")
    return HTMLResponse(content=render_case_study(draft, preview=True))


@router.get("/by-id/{case_study_id}", response_model=CaseStudy)
async def get_case_study_by_id(
    case_study_id: str, store: CaseStudyStore = Depends(get_case_study_store)
):
    case_study = await store.get_by_id(case_study_id)
    if case_study is None:
        raise NotFoundError(NOT_FOUND)
    return case_study


@router.get("/{slug}", response_model=CaseStudy)
async def get_case_study(
    slug: str, store: CaseStudyStore = Depends(get_case_study_store)
):
    case_study = await store.get_by_slug(slug)
    if case_study is None:
        raise NotFoundError(NOT_FOUND)
    return case_study


@router.api_route(
    "/{case_study_id}",
    methods=["PUT", "PATCH"],
    response_model=CaseStudyResponse,
    dependencies=[Depends(require_admin)],
)
async def update_case_study(
    case_study_id: str,
    payload: dict[str, Any] = Body(...),
    store: CaseStudyStore = Depends(get_case_study_store),
):
    """Partially update a case study. The slug cannot change."""
    changes = validate(CaseStudyUpdate, payload, message=INVALID_DATA)
    case_study = await store.update(case_study_id, changes)
    if case_study is None:
        raise NotFoundError(NOT_FOUND)
    return CaseStudyResponse(case_study=case_study)


@router.delete(
    "/{case_study_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_case_study(
    case_study_id: str, store: CaseStudyStore = Depends(get_case_study_store)
):
    if not await store.delete(case_study_id):
        raise NotFoundError(NOT_FOUND)
    return DeleteResponse(message="Case study deleted successfully")
