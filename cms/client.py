"""Authoring client for the CMS API.

Holds the admin session token, decides which admin routes need a login,
and submits editor drafts. Used by the import script and by anything else
that edits content from outside the browser.

Usage::

    async with CmsClient("http://localhost:5000") as cms:
        if await cms.login(secret):
            draft = new_case_study_draft()
            draft.set_title("Retail Data Platform")
            ...
            result = await cms.submit(draft)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from cms.models.blog import BlogPost
from cms.models.case_study import CaseStudy
from cms.services.authoring import Draft

logger = logging.getLogger(__name__)

LOGIN_PATH = "/admin/login"

_IMAGE_ENDPOINTS = {
    "blog": ("/api/blog-images", "url"),
    "case-study": ("/api/case-study-images", "imageUrl"),
}


class CmsClientError(Exception):
    """The API answered with an error envelope (or not at all)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        field_errors: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field_errors = field_errors or {}


@dataclass
class SubmitResult:
    success: bool
    record: BlogPost | CaseStudy | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    message = body.get("message") or f"HTTP {resp.status_code}"
    raise CmsClientError(message, resp.status_code, body.get("errors") or {})


class CmsClient:
    """Async client for the admin side of the CMS API."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None
        self._token: str | None = None
        self._expires_at: datetime | None = None

    async def __aenter__(self) -> "CmsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # -- session -------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        if self._token is None or self._expires_at is None:
            return False
        return self._expires_at > datetime.now(timezone.utc)

    def _forget_session(self) -> None:
        self._token = None
        self._expires_at = None

    def _headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def login(self, secret: str) -> bool:
        """Exchange the admin secret for a session. False on a wrong secret."""
        resp = await self._client.post("/api/admin/login", json={"password": secret})
        if resp.status_code == 401:
            logger.warning("Admin login rejected")
            self._forget_session()
            return False
        _raise_for_error(resp)
        data = resp.json()
        self._token = data["token"]
        self._expires_at = datetime.fromisoformat(
            data["expiresAt"].replace("Z", "+00:00")
        )
        return True

    async def logout(self) -> None:
        """End the session locally, and on the server when one exists."""
        if self._token is not None:
            try:
                resp = await self._client.post(
                    "/api/admin/logout", headers=self._headers()
                )
                _raise_for_error(resp)
            except (httpx.HTTPError, CmsClientError) as exc:
                logger.warning("Server-side logout failed: %s", exc)
        self._forget_session()

    async def check_session(self) -> bool:
        """Ask the server whether the held token is still accepted."""
        if self._token is None:
            return False
        resp = await self._client.get("/api/admin/session", headers=self._headers())
        _raise_for_error(resp)
        if not resp.json().get("authenticated"):
            self._forget_session()
            return False
        return True

    def guard(self, path: str) -> str | None:
        """Where to send the user before showing *path*, or None to proceed.

        Every ``/admin`` route except the login page needs a session.
        """
        if path.rstrip("/") == LOGIN_PATH:
            return None
        if (path == "/admin" or path.startswith("/admin/")) and not self.is_authenticated:
            return LOGIN_PATH
        return None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        resp = await self._client.request(method, path, headers=self._headers(), **kwargs)
        if resp.status_code == 401:
            self._forget_session()
        _raise_for_error(resp)
        return resp

    # -- blog posts ----------------------------------------------------------

    async def list_blog_posts(self, **filters: Any) -> list[BlogPost]:
        params = {
            k: str(v).lower() if isinstance(v, bool) else v
            for k, v in filters.items()
            if v is not None
        }
        resp = await self._request("GET", "/api/blog-posts", params=params)
        return [BlogPost.model_validate(item) for item in resp.json()]

    async def get_blog_post(self, slug: str) -> BlogPost:
        resp = await self._request("GET", f"/api/blog-posts/{slug}")
        return BlogPost.model_validate(resp.json())

    async def get_blog_post_by_id(self, post_id: str) -> BlogPost:
        resp = await self._request("GET", f"/api/blog-posts/by-id/{post_id}")
        return BlogPost.model_validate(resp.json())

    async def create_blog_post(self, data: dict[str, Any]) -> BlogPost:
        resp = await self._request("POST", "/api/blog-posts", json=data)
        return BlogPost.model_validate(resp.json()["post"])

    async def update_blog_post(self, post_id: str, changes: dict[str, Any]) -> BlogPost:
        resp = await self._request("PATCH", f"/api/blog-posts/{post_id}", json=changes)
        return BlogPost.model_validate(resp.json()["post"])

    async def delete_blog_post(self, post_id: str) -> None:
        await self._request("DELETE", f"/api/blog-posts/{post_id}")

    # -- case studies --------------------------------------------------------

    async def list_case_studies(self) -> list[CaseStudy]:
        resp = await self._request("GET", "/api/case-studies")
        return [CaseStudy.model_validate(item) for item in resp.json()]

    async def get_case_study(self, slug: str) -> CaseStudy:
        resp = await self._request("GET", f"/api/case-studies/{slug}")
        return CaseStudy.model_validate(resp.json())

    async def create_case_study(self, data: dict[str, Any]) -> CaseStudy:
        resp = await self._request("POST", "/api/case-studies", json=data)
        return CaseStudy.model_validate(resp.json()["caseStudy"])

    async def update_case_study(
        self, case_study_id: str, changes: dict[str, Any]
    ) -> CaseStudy:
        resp = await self._request(
            "PATCH", f"/api/case-studies/{case_study_id}", json=changes
        )
        return CaseStudy.model_validate(resp.json()["caseStudy"])

    async def delete_case_study(self, case_study_id: str) -> None:
        await self._request("DELETE", f"/api/case-studies/{case_study_id}")

    # -- uploads & drafts ----------------------------------------------------

    async def upload_image(
        self, kind: str, filename: str, content: bytes, content_type: str
    ) -> str:
        """Upload an image for a ``"blog"`` or ``"case-study"`` draft; returns its URL."""
        path, url_key = _IMAGE_ENDPOINTS[kind]
        resp = await self._request(
            "POST", path, files={"image": (filename, content, content_type)}
        )
        return resp.json()[url_key]

    async def submit(self, draft: Draft) -> SubmitResult:
        """Create or update the record behind *draft*.

        Local validation runs first; nothing is sent while it fails. On any
        failure the draft keeps every entered value and carries the errors.
        """
        local_errors = draft.validate()
        if local_errors:
            return SubmitResult(
                success=False,
                field_errors={name: [msg] for name, msg in local_errors.items()},
            )

        payload = draft.payload()
        try:
            if draft.kind == "blog":
                if draft.editing:
                    record = await self.update_blog_post(draft.record_id, payload)
                else:
                    record = await self.create_blog_post(payload)
            else:
                if draft.editing:
                    record = await self.update_case_study(draft.record_id, payload)
                else:
                    record = await self.create_case_study(payload)
        except CmsClientError as exc:
            errors = exc.field_errors or {"_": [exc.message]}
            draft.apply_server_errors(errors)
            logger.info("Draft submit failed (%s): %s", exc.status_code, exc.message)
            return SubmitResult(success=False, field_errors=errors)

        draft.errors = {}
        return SubmitResult(success=True, record=record)
