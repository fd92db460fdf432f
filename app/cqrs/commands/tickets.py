from __future__ import annotations

import logging
from typing import Optional

from app.core.config import settings
from app.core.errors import (
    BadRequest,
    CapacityExceeded,
    Conflict,
    Internal,
    NoActiveRaffle,
    NotApproved,
    NotFound,
)
from app.db import records
from app.db.connection import run_transaction
from app.models.schemas import ContactUpdate, TicketCreate
from app.services import notifications
from app.services.codes import allocate_codes

logger = logging.getLogger(__name__)

TICKET_NOT_FOUND = "Ticket not found"


def create_ticket(payload: TicketCreate) -> dict:
    def _handler(conn):
        if records.get_raffle(conn) is None:
            raise NoActiveRaffle()
        return records.insert_ticket(conn, payload.model_dump())

    ticket = run_transaction(_handler)
    logger.info("Ticket %s submitted for %s tickets", ticket["id"], ticket["number_tickets"])
    return ticket


def approve_ticket(ticket_id: int) -> list[str]:
    """Approve a pending ticket and issue one approval code per ticket unit.

    The code pool lock is taken before anything is read, so the snapshot of
    issued codes cannot go stale before the new codes are committed.
    """

    def _handler(conn):
        records.lock_code_pool(conn)
        ticket = records.get_ticket(conn, ticket_id, for_update=True)
        if ticket is None:
            raise NotFound(TICKET_NOT_FOUND)
        raffle = records.get_raffle(conn)
        if raffle is None:
            raise NoActiveRaffle()
        if ticket["approved"]:
            raise Conflict("Ticket is already approved")

        issued = records.issued_codes(conn)
        requested = ticket["number_tickets"]
        if len(issued) + requested > settings.max_codes:
            raise CapacityExceeded(
                f"No numbers left: {len(issued)} of {settings.max_codes} issued, "
                f"{requested} requested"
            )
        codes = allocate_codes(requested, issued)
        return records.save_approval(conn, ticket_id, codes), raffle

    ticket, raffle = run_transaction(_handler)
    codes = ticket["approval_codes"]
    logger.info("Ticket %s approved with %s codes", ticket_id, len(codes))
    try:
        notifications.dispatch_approval_email(ticket, raffle, codes)
    except Exception:
        logger.exception("Could not dispatch approval email for ticket %s", ticket_id)
    return codes


def reject_ticket(ticket_id: int) -> dict:
    def _handler(conn):
        if not records.delete_ticket(conn, ticket_id):
            raise NotFound(TICKET_NOT_FOUND)

    run_transaction(_handler)
    logger.info("Ticket %s rejected", ticket_id)
    return {"message": "Ticket rejected"}


def resend_ticket(ticket_id: int) -> dict:
    def _handler(conn):
        ticket = records.get_ticket(conn, ticket_id)
        if ticket is None:
            raise NotFound(TICKET_NOT_FOUND)
        if not ticket["approved"]:
            raise NotApproved("The ticket has not been approved yet.")
        raffle = records.get_raffle(conn)
        if raffle is None:
            raise NoActiveRaffle()
        return ticket, raffle

    ticket, raffle = run_transaction(_handler)
    try:
        notifications.send_resent_email(ticket, raffle)
    except notifications.EmailDeliveryError as exc:
        logger.error("Resending email for ticket %s failed: %s", ticket_id, exc)
        raise Internal("Could not resend the email") from exc
    return {"message": "Email resent"}


def update_contact(ticket_id: int, payload: ContactUpdate) -> dict:
    new_email: Optional[str] = payload.new_email
    new_phone: Optional[str] = payload.new_phone
    if not new_email and not new_phone:
        raise BadRequest("Provide a new email or phone number")

    def _handler(conn):
        ticket = records.update_ticket_contact(conn, ticket_id, new_email, new_phone)
        if ticket is None:
            raise NotFound(TICKET_NOT_FOUND)
        return ticket

    run_transaction(_handler)
    return {"message": "Contact details updated"}
