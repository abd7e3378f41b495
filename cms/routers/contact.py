"""Contact form endpoint with per-IP rate limiting."""

import logging
import time
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Request

from cms.config import get_settings
from cms.models.contact import Contact, ContactResponse, ContactSubmission
from cms.services.auth import require_admin
from cms.services.email import deliver_contact_emails
from cms.services.storage import ContactStore, get_contact_store
from cms.services.validation import validate

router = APIRouter(tags=["contact"])
logger = logging.getLogger(__name__)

# In-memory rate limiter: {ip: [timestamps]}; IPs with no recent submissions are dropped
_rate_limits: dict[str, list[float]] = {}
RATE_LIMIT_WINDOW = 3600  # 1 hour


def _prune_rate_limits(cutoff: float) -> None:
    for ip in list(_rate_limits):
        recent = [ts for ts in _rate_limits[ip] if ts > cutoff]
        if recent:
            _rate_limits[ip] = recent
        else:
            del _rate_limits[ip]


def _check_rate_limit(ip: str, limit: int) -> bool:
    """Return True if request is allowed, False if rate limited."""
    now = time.time()
    _prune_rate_limits(now - RATE_LIMIT_WINDOW)
    timestamps = _rate_limits.setdefault(ip, [])
    if len(timestamps) >= limit:
        return False
    timestamps.append(now)
    return True


@router.post("/contact", response_model=ContactResponse)
async def submit_contact(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    store: ContactStore = Depends(get_contact_store),
):
    """Store a contact submission, then email the operator and the submitter.

    The emails are sent after the response; their outcome never changes it.
    """
    client_ip = request.client.host if request.client else "unknown"

    if not _check_rate_limit(client_ip, get_settings().contact_rate_limit):
        raise HTTPException(
            status_code=429, detail="Too many submissions. Try again later."
        )

    submission = validate(ContactSubmission, payload, message="Invalid form data")
    contact = await store.create(submission)
    background_tasks.add_task(deliver_contact_emails, contact)

    logger.info("Contact submission %s from %s", contact.id, client_ip)
    return ContactResponse(contact=contact)


@router.get(
    "/contacts",
    response_model=list[Contact],
    dependencies=[Depends(require_admin)],
)
async def list_contacts(store: ContactStore = Depends(get_contact_store)):
    return await store.list_all()
