"""Approval code allocation.

Approval codes are 4-digit, zero-padded decimal strings ("0000".."9999").
Codes are drawn uniformly at random so that buyers cannot predict which
numbers they will get; a draw that collides with an issued code, or with one
already taken earlier in the same batch, is discarded and retried.
"""
from __future__ import annotations

import random
from typing import Iterable, Optional

from app.core.config import CODE_SPACE

CODE_WIDTH = 4

_SYSTEM_RANDOM = random.SystemRandom()


def format_code(number: int) -> str:
    if not 0 <= number < CODE_SPACE:
        raise ValueError(f"Code out of range: {number}")
    return str(number).zfill(CODE_WIDTH)


def is_valid_code(value: str) -> bool:
    return len(value) == CODE_WIDTH and value.isascii() and value.isdigit()


def available_codes(issued: Iterable[str]) -> int:
    return CODE_SPACE - len(set(issued))


def allocate_codes(
    count: int, issued: Iterable[str], rng: Optional[random.Random] = None
) -> list[str]:
    """Return ``count`` distinct codes that are not in ``issued``.

    ``issued`` must be a snapshot taken while holding the code pool lock.
    Callers check the configured code budget first; asking for more codes
    than remain in the space raises ``ValueError`` instead of sampling
    forever.
    """
    if count < 1:
        raise ValueError("count must be a positive integer")
    taken = set(issued)
    remaining = available_codes(taken)
    if count > remaining:
        raise ValueError(f"Requested {count} codes but only {remaining} are available")

    rng = rng or _SYSTEM_RANDOM
    batch: list[str] = []
    while len(batch) < count:
        code = format_code(rng.randrange(CODE_SPACE))
        if code in taken:
            continue
        taken.add(code)
        batch.append(code)
    return batch
