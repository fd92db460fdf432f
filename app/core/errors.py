from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException


class RaffleError(HTTPException):
    status_code = 500
    error_type = "internal"
    default_detail = "Internal Server Error"

    def __init__(self, detail: Any = None, headers: Optional[dict] = None) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=self.default_detail if detail is None else detail,
            headers=headers,
        )


class BadRequest(RaffleError):
    status_code = 400
    error_type = "bad_request"
    default_detail = "Invalid request"


class NotFound(RaffleError):
    status_code = 404
    error_type = "not_found"
    default_detail = "Not found"


class Conflict(RaffleError):
    status_code = 400
    error_type = "conflict"
    default_detail = "Conflict"


class NoActiveRaffle(RaffleError):
    status_code = 400
    error_type = "no_active_raffle"
    default_detail = "There is no active raffle at the moment"


class NotApproved(RaffleError):
    status_code = 400
    error_type = "not_approved"
    default_detail = "Ticket has not been approved yet"


class CapacityExceeded(RaffleError):
    status_code = 400
    error_type = "capacity_exceeded"
    default_detail = "No numbers left"


class Unauthorized(RaffleError):
    status_code = 401
    error_type = "unauthorized"
    default_detail = "Missing credentials"


class Forbidden(RaffleError):
    status_code = 403
    error_type = "forbidden"
    default_detail = "denied"


class Internal(RaffleError):
    pass


class PayloadTooLarge(RaffleError):
    status_code = 413
    error_type = "payload_too_large"
    default_detail = "Upload is too large"
