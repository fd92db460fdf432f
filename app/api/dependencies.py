from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import db_configured, settings
from app.core.errors import Forbidden, Internal, Unauthorized
from app.core.security import verify_admin_token

bearer_scheme = HTTPBearer(auto_error=False)


def require_db() -> None:
    if not db_configured():
        raise Internal("Database is not configured")


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    if not settings.admin_secret:
        raise Internal("Admin access is not configured")
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Missing bearer token", headers={"WWW-Authenticate": "Bearer"})
    if not verify_admin_token(credentials.credentials):
        raise Forbidden("Invalid or expired admin token")
