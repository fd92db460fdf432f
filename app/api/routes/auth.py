import logging

from fastapi import APIRouter

from app.core.config import settings
from app.core.errors import Forbidden, Internal
from app.core.security import issue_admin_token, secret_matches
from app.models.schemas import AdminAuthRequest, AdminAuthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/auth", response_model=AdminAuthResponse)
def admin_auth(payload: AdminAuthRequest):
    if not settings.admin_secret:
        raise Internal("Admin access is not configured")
    if not secret_matches(payload.token, settings.admin_secret):
        logger.warning("Rejected admin login attempt")
        raise Forbidden()
    token, expires_at = issue_admin_token()
    return {"message": "Success", "token": token, "expires_at": expires_at}
