"""
Buyer notifications sent through Resend.

Every provider call goes through an HTTP client with a timeout of
EMAIL_TIMEOUT_SECONDS, so a hung provider frees its thread. Approval emails
run on a small thread pool and never block or undo the approval. Resends run
on the caller's thread and surface failures to the caller.
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from html import escape
import logging
from typing import Optional

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

_EXECUTOR = ThreadPoolExecutor(max_workers=settings.email_workers, thread_name_prefix="mailer")


class EmailDeliveryError(RuntimeError):
    pass


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Send one email. Returns False when Resend is not configured; raises on provider errors."""
    if not settings.resend_enabled:
        logger.info("Email skipped (Resend not configured): to=%s, subject=%s", to, subject)
        return False
    resend.api_key = settings.resend_api_key
    resend.default_http_client = resend.RequestsClient(timeout=settings.email_timeout_seconds)
    resend.Emails.send(
        {
            "from": settings.email_from,
            "to": [to],
            "subject": subject,
            "html": html_body,
        }
    )
    logger.info("Email sent: to=%s, subject=%s", to, subject)
    return True


def _code_tiles(codes: list[str]) -> str:
    return "".join(
        f"""
        <div style="background: #f4f4f4; margin-bottom: 10px; padding: 12px 16px; border-radius: 8px;
        font-size: 18px; font-weight: bold; border: 1px solid #ddd; text-align: center;">
            &#127903; {escape(code)}
        </div>"""
        for code in codes
    )


def render_approval_email(
    ticket: dict, raffle: dict, codes: list[str], resent: bool = False, sent_on: Optional[datetime] = None
) -> tuple[str, str]:
    full_name = escape(ticket.get("full_name") or "")
    email = escape(ticket.get("email") or "")
    raffle_name = escape(raffle.get("name") or "")
    date_label = (sent_on or datetime.now(timezone.utc)).strftime("%A, %B %d, %Y")
    if resent:
        subject = "Your approved tickets (resent)"
        greeting = f"Hi {full_name}, here are your approved tickets for <strong>{raffle_name}</strong> again."
        heading = "Your tickets are still active and approved!"
    else:
        subject = "Your purchase has been confirmed!"
        greeting = f"Hi {full_name}, thanks for your purchase! {raffle_name}"
        heading = "Congratulations, your tickets have been approved!"
    html = f"""
    <div style="font-family: Arial, sans-serif; text-align: center; padding: 20px; border: 1px solid #ddd;">
        <p style="margin-top: 20px;">{greeting}</p>
        <h2 style="color: #4CAF50;">{heading}</h2>
        <p><strong>Buyer:</strong> {full_name}</p>
        <p><strong>Email:</strong> {email}</p>
        <p><strong>Date:</strong> {date_label}</p>
        <p>Ticket(s) purchased ({len(codes)}):</p>
        <div style="display: grid; grid-template-columns: repeat(auto-fill, minmax(150px, 1fr)); gap: 10px;
        padding: 10px; max-width: 100%; margin: 0 auto;">{_code_tiles(codes)}
        </div>
        <strong>Buy more to increase your chances of winning.<br>These numbers are picked at random.</strong>
    </div>
    """
    return subject, html


def _log_outcome(ticket_id, future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error("Approval email for ticket %s failed", ticket_id, exc_info=exc)


def dispatch_approval_email(ticket: dict, raffle: dict, codes: list[str]) -> Future:
    """Queue the approval email and return immediately; failures are only logged."""
    subject, html = render_approval_email(ticket, raffle, codes)
    future = _EXECUTOR.submit(send_email, ticket["email"], subject, html)
    future.add_done_callback(lambda done: _log_outcome(ticket.get("id"), done))
    return future


def send_resent_email(ticket: dict, raffle: dict) -> None:
    if not settings.resend_enabled:
        raise EmailDeliveryError("Email delivery is not configured")
    subject, html = render_approval_email(ticket, raffle, ticket["approval_codes"], resent=True)
    try:
        send_email(ticket["email"], subject, html)
    except Exception as exc:
        raise EmailDeliveryError(str(exc) or exc.__class__.__name__) from exc
