from __future__ import annotations

from app.core.errors import NotFound
from app.cqrs.commands.dollar import dollar_out
from app.db.connection import fetch_one


def get_dollar_price() -> dict:
    row = fetch_one("SELECT id, price_vez, updated_at FROM dollar_prices WHERE slot = 1")
    if not row:
        raise NotFound("No dollar price has been registered.")
    return dollar_out(row)
