from __future__ import annotations

from app.cqrs.commands.raffles import raffle_out
from app.db.connection import fetch_all, fetch_one
from app.db.records import RAFFLE_COLUMNS
from app.services.uploads import public_url


def _with_image_urls(raffle: dict, base_url: str) -> dict:
    return {**raffle, "images": [public_url(base_url, image) for image in raffle["images"]]}


def list_raffles(base_url: str) -> dict:
    rows = fetch_all(f"SELECT {RAFFLE_COLUMNS} FROM raffles ORDER BY created_at DESC")
    sold = fetch_one(
        """
        SELECT COALESCE(SUM(cardinality(approval_codes)), 0) AS total_sold
        FROM tickets
        WHERE approved
        """
    )
    return {
        "raffles": [_with_image_urls(raffle_out(row), base_url) for row in rows],
        "total_sold": int(sold["total_sold"]) if sold else 0,
    }
