"""Contact-form emails: operator notification and submitter confirmation.

Both are best effort. They run after the HTTP response has been sent and a
failure in one never affects the other or the submission itself.
"""

import html
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from cms.config import get_settings
from cms.models.contact import Contact
from cms.services.http_client import get_shared_client

logger = logging.getLogger(__name__)

LONDON = ZoneInfo("Europe/London")


def format_submission_time(created_at: datetime) -> str:
    """e.g. "Monday, 19 October 2026 at 14:05" in UK local time."""
    local = created_at.astimezone(LONDON)
    return f"{local:%A}, {local.day} {local:%B %Y} at {local:%H:%M}"


def _notification_body(contact: Contact) -> str:
    rows = [
        ("Name", contact.name),
        ("Email", contact.email),
        ("Company", contact.company or "-"),
        ("Submitted", format_submission_time(contact.created_at)),
        ("Submission ID", contact.id),
    ]
    table = "".join(
        f"<tr><th align='left'>{label}</th><td>{html.escape(value)}</td></tr>"
        for label, value in rows
    )
    message = html.escape(contact.message).replace("\n", "<br>")
    return f"<h2>New contact form submission</h2><table>{table}</table><p>{message}</p>"


def _confirmation_body(contact: Contact) -> str:
    name = html.escape(contact.name)
    message = html.escape(contact.message).replace("\n", "<br>")
    return (
        f"<p>Hi {name},</p>"
        "<p>Thanks for getting in touch. We have received your message and "
        "will reply within two working days.</p>"
        f"<blockquote>{message}</blockquote>"
        "<p>Adaptive Edge</p>"
    )


async def send_email(to: str, subject: str, html_body: str, reply_to: str | None = None) -> bool:
    """POST one message to the transactional email API.

    Returns False (without sending) when no API key is configured.

    Raises:
        httpx.HTTPError: on transport errors or a non-2xx response.
    """
    settings = get_settings()
    if not settings.email_api_key:
        logger.info("EMAIL_API_KEY not set, skipping email %r to %s", subject, to)
        return False

    payload = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html_body,
    }
    if reply_to:
        payload["reply_to"] = reply_to

    client = get_shared_client()
    resp = await client.post(
        settings.email_api_url,
        headers={"Authorization": f"Bearer {settings.email_api_key}"},
        json=payload,
    )
    resp.raise_for_status()
    return True


async def send_contact_notification(contact: Contact) -> bool:
    settings = get_settings()
    return await send_email(
        settings.notification_email,
        f"New enquiry from {contact.name}",
        _notification_body(contact),
        reply_to=contact.email,
    )


async def send_contact_confirmation(contact: Contact) -> bool:
    return await send_email(
        contact.email,
        "Thanks for contacting Adaptive Edge",
        _confirmation_body(contact),
    )


async def deliver_contact_emails(contact: Contact) -> None:
    """Send both contact emails; failures are logged, never raised."""
    try:
        await send_contact_notification(contact)
    except Exception:
        logger.exception("Failed to send notification email for contact %s", contact.id)

    try:
        await send_contact_confirmation(contact)
    except Exception:
        logger.exception("Failed to send confirmation email for contact %s", contact.id)
