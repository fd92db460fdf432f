from fastapi import APIRouter, Depends, Request

from app.api.dependencies import require_admin, require_db
from app.cqrs.commands import raffles as raffles_commands
from app.cqrs.queries import raffles as raffles_queries
from app.models.schemas import (
    MessageResponse,
    RaffleCreate,
    RaffleListResponse,
    RaffleOut,
    VisibilityResponse,
)

router = APIRouter(prefix="/raffles", tags=["raffles"])


@router.post(
    "", response_model=RaffleOut, status_code=201, dependencies=[Depends(require_admin)]
)
def create_raffle(payload: RaffleCreate):
    require_db()
    return raffles_commands.create_raffle(payload)


@router.get("", response_model=RaffleListResponse)
def list_raffles(request: Request):
    require_db()
    return raffles_queries.list_raffles(str(request.base_url))


@router.delete("", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_raffle():
    require_db()
    return raffles_commands.delete_raffle()


@router.post(
    "/toggle-visibility", response_model=VisibilityResponse, dependencies=[Depends(require_admin)]
)
def toggle_visibility():
    require_db()
    return raffles_commands.toggle_visibility()
