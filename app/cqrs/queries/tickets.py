from __future__ import annotations

from typing import Optional

from app.core.errors import BadRequest, NotApproved, NotFound
from app.db.connection import fetch_all, fetch_one
from app.db.records import TICKET_COLUMNS, ticket_row
from app.services.codes import is_valid_code
from app.services.uploads import public_url

DEFAULT_PAGE_SIZE = 150
TOP_BUYERS_LIMIT = 10
NOT_SOLD_MESSAGE = "This ticket has not been sold yet."


def ticket_out(row: dict, base_url: str) -> dict:
    ticket = ticket_row(row)
    ticket["voucher"] = public_url(base_url, ticket.get("voucher"))
    return ticket


def list_tickets(
    base_url: str,
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    order: str = "desc",
) -> list[dict]:
    if page < 1 or page_size < 1:
        raise BadRequest("page and numbertoshow must be >= 1")
    clauses: list[str] = []
    params: list = []
    if status != "all":
        clauses.append("approved = false")
    if payment_method:
        clauses.append("payment_method = %s")
        params.append(payment_method)
    sql = f"SELECT {TICKET_COLUMNS} FROM tickets"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    direction = "ASC" if order == "asc" else "DESC"
    sql += f" ORDER BY id {direction} LIMIT %s OFFSET %s"
    params.extend([page_size, (page - 1) * page_size])
    rows = fetch_all(sql, tuple(params))
    return [ticket_out(row, base_url) for row in rows]


def top_buyers() -> list[dict]:
    rows = fetch_all(
        """
        SELECT email,
               (array_agg(full_name ORDER BY id))[1] AS full_name,
               (array_agg(phone ORDER BY id))[1] AS phone,
               SUM(number_tickets) AS total_tickets,
               COUNT(*) AS purchases
        FROM tickets
        WHERE approved
        GROUP BY email
        ORDER BY total_tickets DESC, email ASC
        LIMIT %s
        """,
        (TOP_BUYERS_LIMIT,),
    )
    return [
        {
            "email": row["email"],
            "full_name": row["full_name"],
            "phone": row.get("phone"),
            "total_tickets": int(row["total_tickets"]),
            "purchases": int(row["purchases"]),
        }
        for row in rows
    ]


def sold_numbers() -> dict:
    rows = fetch_all(
        """
        SELECT c.code
        FROM issued_codes c
        JOIN tickets t ON t.id = c.ticket_id
        WHERE t.approved
        ORDER BY t.id ASC, c.position ASC
        """
    )
    codes = [str(row["code"]) for row in rows]
    return {"all_sold_numbers": codes, "total_sold": len(codes)}


def check_number(number: Optional[str]) -> dict:
    if not number:
        raise BadRequest("The ticket number (`number`) is required.")
    if not is_valid_code(number):
        return {"sold": False, "message": NOT_SOLD_MESSAGE}
    row = fetch_one(
        f"""
        SELECT {TICKET_COLUMNS}
        FROM tickets
        WHERE id = (SELECT ticket_id FROM issued_codes WHERE code = %s)
        """,
        (number,),
    )
    if not row:
        return {"sold": False, "message": NOT_SOLD_MESSAGE}
    ticket = ticket_row(row)
    ticket.pop("voucher", None)
    return {"sold": True, "data": ticket}


def check_email(email: Optional[str]) -> dict:
    if not email or not isinstance(email, str):
        raise BadRequest("Email missing or invalid")
    rows = fetch_all(
        f"""
        SELECT {TICKET_COLUMNS}
        FROM tickets
        WHERE lower(email) = lower(%s)
        ORDER BY id ASC
        """,
        (email.strip(),),
    )
    if not rows:
        raise NotFound("No tickets were found for this email, the buyer does not exist.")
    approved = [ticket_row(row) for row in rows if row["approved"]]
    if not approved:
        raise NotApproved(
            "Your purchase was received but has not been approved yet. "
            "Please wait while we verify it."
        )
    first = approved[0]
    codes = [code for ticket in approved for code in ticket["approval_codes"]]
    return {
        "success": True,
        "data": [
            {
                "id": first["id"],
                "full_name": first["full_name"],
                "email": first["email"],
                "tickets": codes,
            }
        ],
    }
