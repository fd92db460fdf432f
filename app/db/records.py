from __future__ import annotations

import uuid
from typing import Optional

from app.db.connection import query_all, query_one

# pg_advisory_xact_lock key serializing every write to issued_codes.
CODE_POOL_LOCK_KEY = 5_262_417

RAFFLE_COLUMNS = "id, name, description, ticket_price, images, visible, min_value, created_at"
TICKET_COLUMNS = (
    "id, number_tickets, full_name, email, phone, reference, payment_method, "
    "amount_paid, voucher, created_at, approved, approval_codes"
)


def ticket_row(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    codes = row.get("approval_codes") or []
    return {**row, "approval_codes": [str(code) for code in codes]}


def lock_code_pool(conn) -> None:
    cur = conn.cursor()
    cur.execute(f"SELECT pg_advisory_xact_lock({CODE_POOL_LOCK_KEY})")
    cur.close()


def get_raffle(conn) -> Optional[dict]:
    return query_one(conn, f"SELECT {RAFFLE_COLUMNS} FROM raffles WHERE slot = 1")


def insert_raffle(conn, data: dict) -> Optional[dict]:
    """Insert the singleton raffle; returns None when one already exists."""
    return query_one(
        conn,
        f"""
        INSERT INTO raffles (id, name, description, ticket_price, images, visible, min_value)
        VALUES (%s, %s, %s, %s, %s::text[], true, %s)
        ON CONFLICT (slot) DO NOTHING
        RETURNING {RAFFLE_COLUMNS}
        """,
        (
            uuid.uuid4(),
            data["name"],
            data.get("description"),
            data["ticket_price"],
            list(data.get("images") or []),
            data.get("min_value", 1),
        ),
    )


def delete_raffle(conn) -> bool:
    cur = conn.cursor()
    cur.execute("SELECT id FROM raffles WHERE slot = 1 FOR UPDATE")
    if cur.fetchone() is None:
        cur.close()
        return False
    cur.execute("DELETE FROM tickets")
    cur.execute("DELETE FROM raffles WHERE slot = 1")
    cur.close()
    return True


def toggle_raffle_visibility(conn) -> Optional[bool]:
    row = query_one(
        conn,
        "UPDATE raffles SET visible = NOT visible WHERE slot = 1 RETURNING visible",
    )
    return None if row is None else row["visible"]


def get_ticket(conn, ticket_id: int, for_update: bool = False) -> Optional[dict]:
    sql = f"SELECT {TICKET_COLUMNS} FROM tickets WHERE id = %s"
    if for_update:
        sql += " FOR UPDATE"
    return ticket_row(query_one(conn, sql, (ticket_id,)))


def insert_ticket(conn, data: dict) -> dict:
    return ticket_row(
        query_one(
            conn,
            f"""
            INSERT INTO tickets (
                number_tickets, full_name, email, phone, reference,
                payment_method, amount_paid, voucher
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {TICKET_COLUMNS}
            """,
            (
                data["number_tickets"],
                data["full_name"],
                data["email"],
                data.get("phone"),
                data.get("reference"),
                data.get("payment_method"),
                data.get("amount_paid"),
                data.get("voucher"),
            ),
        )
    )


def delete_ticket(conn, ticket_id: int) -> bool:
    cur = conn.cursor()
    cur.execute("DELETE FROM tickets WHERE id = %s", (ticket_id,))
    deleted = cur.rowcount == 1
    cur.close()
    return deleted


def update_ticket_contact(
    conn, ticket_id: int, email: Optional[str], phone: Optional[str]
) -> Optional[dict]:
    set_clauses = []
    params: list = []
    if email:
        set_clauses.append("email = %s")
        params.append(email)
    if phone:
        set_clauses.append("phone = %s")
        params.append(phone)
    params.append(ticket_id)
    return ticket_row(
        query_one(
            conn,
            f"UPDATE tickets SET {', '.join(set_clauses)} WHERE id = %s RETURNING {TICKET_COLUMNS}",
            tuple(params),
        )
    )


def issued_codes(conn) -> set[str]:
    rows = query_all(conn, "SELECT code FROM issued_codes")
    return {str(row["code"]) for row in rows}


def save_approval(conn, ticket_id: int, codes: list[str]) -> dict:
    cur = conn.cursor()
    for position, code in enumerate(codes):
        cur.execute(
            "INSERT INTO issued_codes (code, ticket_id, position) VALUES (%s, %s, %s)",
            (code, ticket_id, position),
        )
    cur.close()
    return ticket_row(
        query_one(
            conn,
            f"""
            UPDATE tickets
            SET approved = true, approval_codes = %s::text[]
            WHERE id = %s
            RETURNING {TICKET_COLUMNS}
            """,
            (list(codes), ticket_id),
        )
    )


def upsert_dollar_price(conn, price: str) -> dict:
    return query_one(
        conn,
        """
        INSERT INTO dollar_prices (id, price_vez)
        VALUES (%s, %s)
        ON CONFLICT (slot) DO UPDATE SET price_vez = EXCLUDED.price_vez, updated_at = now()
        RETURNING id, price_vez, updated_at
        """,
        (uuid.uuid4(), price),
    )
