from __future__ import annotations

import logging

from app.core.errors import Conflict, NotFound
from app.db import records
from app.db.connection import run_transaction
from app.models.schemas import RaffleCreate

logger = logging.getLogger(__name__)


def raffle_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "description": row.get("description"),
        "ticket_price": row["ticket_price"],
        "images": list(row.get("images") or []),
        "visible": row["visible"],
        "min_value": row["min_value"],
        "created_at": row["created_at"],
    }


def create_raffle(payload: RaffleCreate) -> dict:
    def _handler(conn):
        row = records.insert_raffle(conn, payload.model_dump())
        if row is None:
            raise Conflict("An active raffle already exists. No more can be created.")
        return row

    row = run_transaction(_handler)
    logger.info("Raffle %s created", row["id"])
    return raffle_out(row)


def delete_raffle() -> dict:
    def _handler(conn):
        if not records.delete_raffle(conn):
            raise NotFound("There is no active raffle to delete.")

    run_transaction(_handler)
    logger.info("Raffle deleted together with all tickets")
    return {"message": "Raffle deleted"}


def toggle_visibility() -> dict:
    def _handler(conn):
        visible = records.toggle_raffle_visibility(conn)
        if visible is None:
            raise NotFound("There is no active raffle")
        return visible

    visible = run_transaction(_handler)
    return {"message": "Visibility updated", "visible": visible}
