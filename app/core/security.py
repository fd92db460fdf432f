from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone
from functools import lru_cache
import hashlib
import hmac
import json
import secrets
from typing import Optional

from app.core.config import settings

_SESSION_SALT = b"raffles-admin-session"


def hash_password(password: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 120_000)
    return digest.hex()


@lru_cache(maxsize=4)
def _signing_key(secret: str) -> bytes:
    return bytes.fromhex(hash_password(secret, _SESSION_SALT))


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(_signing_key(secret), payload.encode("ascii"), hashlib.sha256).hexdigest()


def secret_matches(candidate: Optional[str], secret: str) -> bool:
    if not candidate or not secret:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8"))


def issue_admin_token(
    secret: Optional[str] = None,
    ttl_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> tuple[str, datetime]:
    """Return a signed admin session token and its expiry.

    The token is ``<payload>.<signature>`` where the payload is base64url JSON
    holding the subject, expiry and a random nonce, and the signature is an
    HMAC-SHA256 keyed from the admin secret.
    """
    secret = settings.admin_secret if secret is None else secret
    ttl = settings.admin_token_ttl_minutes if ttl_minutes is None else ttl_minutes
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=ttl)
    body = {"sub": "admin", "exp": int(expires_at.timestamp()), "nonce": secrets.token_hex(8)}
    payload = _b64encode(json.dumps(body, separators=(",", ":")).encode("utf-8"))
    return f"{payload}.{_sign(payload, secret)}", expires_at


def verify_admin_token(
    token: str, secret: Optional[str] = None, now: Optional[datetime] = None
) -> bool:
    secret = settings.admin_secret if secret is None else secret
    if not secret or not token or token.count(".") != 1:
        return False
    payload, signature = token.split(".", 1)
    try:
        expected = _sign(payload, secret)
    except UnicodeEncodeError:
        return False
    if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
        return False
    try:
        body = json.loads(_b64decode(payload))
    except ValueError:
        return False
    if not isinstance(body, dict) or body.get("sub") != "admin":
        return False
    current = now or datetime.now(timezone.utc)
    exp = body.get("exp")
    return isinstance(exp, int) and current.timestamp() < exp
