"""
Adaptive Edge CMS API

FastAPI backend for the marketing site: blog posts, case studies, the
contact form, image uploads, and the admin session that guards authoring.
"""

import logging
import time
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cms.config import get_settings
from cms.middleware import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from cms.models.common import ErrorResponse
from cms.routers import admin, blog_posts, case_studies, contact, media, pages, uploads
from cms.services.database import (
    check_database_connectivity,
    dispose_engine,
    init_db,
)
from cms.services.errors import (
    AuthenticationError,
    ContentValidationError,
    NotFoundError,
    StorageError,
    UniqueConstraintViolation,
    UploadRejected,
)
from cms.services.http_client import close_shared_client
from cms.services.uploads import IMAGE_DIRS, ensure_upload_dirs, upload_dir

logger = logging.getLogger(__name__)

settings = get_settings()

# Health check cache: (result_dict, timestamp)
_health_cache: tuple[dict[str, Any], float] | None = None
_HEALTH_CACHE_TTL = 30  # seconds

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def configure_logging() -> None:
    """Root logging with the request ID on every line."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIDLogFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    configure_logging()
    if settings.create_tables_on_startup:
        await init_db()
    for directory in ensure_upload_dirs():
        logger.info("Created upload directory %s", directory)
    yield
    await close_shared_client()
    await dispose_engine()


app = FastAPI(
    title="Adaptive Edge CMS API",
    description="Content API for the Adaptive Edge marketing site",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

app.add_middleware(SecurityHeadersMiddleware)

# Request ID (added last, so it is the outermost middleware)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(blog_posts.router, prefix="/api")
app.include_router(case_studies.router, prefix="/api")
app.include_router(contact.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(media.router)
app.include_router(pages.router)


def _error(
    status_code: int, message: str, errors: dict[str, list[str]] | None = None
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors or None)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


@app.exception_handler(ContentValidationError)
async def content_validation_handler(
    request: Request, exc: ContentValidationError
) -> JSONResponse:
    return _error(400, exc.message, exc.field_errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies, query strings, and uploads are client errors (400)."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        key = loc[0] if loc else "_"
        errors.setdefault(key, []).append(err.get("msg", "Invalid value"))
    return _error(400, "Invalid request", errors)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(AuthenticationError)
async def authentication_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    response = _error(401, exc.message)
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(UploadRejected)
async def upload_rejected_handler(request: Request, exc: UploadRejected) -> JSONResponse:
    return _error(exc.status_code, exc.message)


@app.exception_handler(UniqueConstraintViolation)
async def unique_violation_handler(
    request: Request, exc: UniqueConstraintViolation
) -> JSONResponse:
    return _error(409, str(exc), {exc.field: ["already in use"]})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "Storage failure on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return _error(500, str(exc) or "Internal server error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    response = _error(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def _check_config() -> str:
    """Verify the admin secret is configured. Returns 'ok' or 'fail'."""
    s = get_settings()
    return "ok" if s.admin_password else "fail"


def _check_upload_dirs() -> str:
    if all(upload_dir(kind).is_dir() for kind in IMAGE_DIRS):
        return "ok"
    return "fail"


async def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    global _health_cache
    now = time.time()
    if _health_cache is not None:
        cached_result, cached_at = _health_cache
        if now - cached_at < _HEALTH_CACHE_TTL:
            return cached_result

    database_status = "ok" if await check_database_connectivity() else "fail"
    checks = {
        "config": _check_config(),
        "database": database_status,
        "uploads": _check_upload_dirs(),
    }
    failed = [k for k, v in checks.items() if v != "ok"]

    if database_status != "ok":
        overall = "unhealthy"
    elif failed:
        overall = "degraded"
    else:
        overall = "ok"
    if failed:
        logger.warning("Health check %s, failed: %s", overall, ", ".join(failed))

    result: dict[str, Any] = {
        "status": overall,
        "service": "adaptive-edge-cms",
        "version": "0.1.0",
        "checks": checks,
    }
    _health_cache = (result, now)
    return result


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check verifying service dependencies."""
    result = await _run_health_checks()
    status_code = 200 if result["status"] in ("ok", "degraded") else 503
    return JSONResponse(content=result, status_code=status_code)
