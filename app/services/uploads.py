from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import BinaryIO, Optional

from app.core.config import settings
from app.core.errors import BadRequest, PayloadTooLarge

logger = logging.getLogger(__name__)

# Payment proofs are images or PDFs only.
ALLOWED_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".webp", ".pdf"})
_CHUNK_SIZE = 1024 * 1024


def _suffix(original_name: Optional[str]) -> str:
    suffix = Path(original_name or "").suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise BadRequest(
            "Unsupported file type. Allowed: " + ", ".join(sorted(ALLOWED_SUFFIXES))
        )
    return suffix


def _reserve(target_dir: Path, stamp: int, suffix: str):
    while True:
        path = target_dir / f"{stamp}{suffix}"
        try:
            return path, open(path, "xb")
        except FileExistsError:
            stamp += 1


def save_upload(
    stream: BinaryIO,
    original_name: Optional[str],
    directory: Optional[str] = None,
    clock=time.time,
    max_bytes: Optional[int] = None,
) -> str:
    """Store a payment proof under a millisecond-timestamp name and return that name.

    The name never overwrites an existing file. A stream longer than
    ``max_bytes`` is rejected and the partial file is removed.
    """
    suffix = _suffix(original_name)
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    target_dir = Path(directory or settings.uploads_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path, handle = _reserve(target_dir, int(clock() * 1000), suffix)
    written = 0
    try:
        with handle:
            while True:
                chunk = stream.read(_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > limit:
                    raise PayloadTooLarge(f"File exceeds the {limit} byte limit")
                handle.write(chunk)
    except Exception:
        path.unlink(missing_ok=True)
        raise
    logger.info("Stored upload %s (%s bytes)", path.name, written)
    return path.name


def public_url(base_url: str, filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    if filename.startswith(("http://", "https://", "data:")):
        return filename
    return f"{base_url.rstrip('/')}/uploads/{filename}"
