from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from app.api.dependencies import require_admin, require_db
from app.cqrs.commands import tickets as tickets_commands
from app.cqrs.queries import tickets as tickets_queries
from app.models.schemas import (
    ApprovalResponse,
    CodeCheckResponse,
    ContactUpdate,
    EmailCheckResponse,
    MessageResponse,
    SoldNumbersResponse,
    TicketCreate,
    TicketOut,
    TopBuyer,
)

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post("", response_model=TicketOut, status_code=201)
def create_ticket(payload: TicketCreate):
    require_db()
    return tickets_commands.create_ticket(payload)


@router.get("", response_model=list[TicketOut], dependencies=[Depends(require_admin)])
def list_tickets(
    request: Request,
    status: Optional[str] = Query(None, description="'all' for every ticket, pending only otherwise"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    page: int = Query(1, ge=1),
    numbertoshow: int = Query(tickets_queries.DEFAULT_PAGE_SIZE, ge=1, le=1000),
    order: str = Query("desc"),
):
    require_db()
    return tickets_queries.list_tickets(
        str(request.base_url),
        status=status,
        payment_method=payment_method,
        page=page,
        page_size=numbertoshow,
        order=order,
    )


@router.post(
    "/approve/{ticket_id}", response_model=ApprovalResponse, dependencies=[Depends(require_admin)]
)
def approve_ticket(ticket_id: int):
    require_db()
    codes = tickets_commands.approve_ticket(ticket_id)
    return {"message": "Ticket approved and codes sent", "approval_codes": codes}


@router.post(
    "/reject/{ticket_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)]
)
def reject_ticket(ticket_id: int):
    require_db()
    return tickets_commands.reject_ticket(ticket_id)


@router.post(
    "/resend/{ticket_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)]
)
def resend_ticket(ticket_id: int):
    require_db()
    return tickets_commands.resend_ticket(ticket_id)


@router.put(
    "/update-contact/{ticket_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def update_contact(ticket_id: int, payload: ContactUpdate):
    require_db()
    return tickets_commands.update_contact(ticket_id, payload)


@router.get("/top-buyers", response_model=list[TopBuyer])
def top_buyers():
    require_db()
    return tickets_queries.top_buyers()


@router.get("/sold-numbers", response_model=SoldNumbersResponse)
def sold_numbers():
    require_db()
    return tickets_queries.sold_numbers()


@router.get("/check", response_model=CodeCheckResponse, response_model_exclude_none=True)
def check_number(number: Optional[str] = Query(None)):
    require_db()
    return tickets_queries.check_number(number)


@router.post("/check", response_model=EmailCheckResponse)
def check_email(email: Optional[str] = Body(None, embed=True)):
    require_db()
    return tickets_queries.check_email(email)
