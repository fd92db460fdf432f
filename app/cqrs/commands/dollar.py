from __future__ import annotations

from app.db import records
from app.db.connection import run_transaction
from app.models.schemas import DollarPriceIn


def dollar_out(row: dict) -> dict:
    return {"id": str(row["id"]), "price": row["price_vez"], "updated_at": row["updated_at"]}


def update_dollar_price(payload: DollarPriceIn) -> dict:
    row = run_transaction(lambda conn: records.upsert_dollar_price(conn, payload.price))
    return {"message": "Dollar price updated", "dollar": dollar_out(row)}
