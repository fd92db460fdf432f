from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(ApiModel):
    status: str
    time: datetime


class MigrationRunResponse(ApiModel):
    status: str
    applied_at: datetime


class MessageResponse(ApiModel):
    message: str


class AdminAuthRequest(ApiModel):
    token: str = Field(..., min_length=1)


class AdminAuthResponse(ApiModel):
    message: str
    token: str
    expires_at: datetime


class DollarPriceIn(ApiModel):
    price: str = Field(..., alias="priceVez", min_length=1, max_length=50)


class DollarPriceOut(ApiModel):
    id: str
    price: str = Field(..., alias="priceVez")
    updated_at: datetime


class DollarPriceUpdateResponse(ApiModel):
    message: str
    dollar: DollarPriceOut


class RaffleCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    ticket_price: Decimal = Field(..., gt=0)
    min_value: int = Field(1, ge=1)
    images: list[str] = Field(default_factory=list)


class RaffleOut(ApiModel):
    id: str
    name: str
    description: Optional[str]
    ticket_price: Decimal
    images: list[str]
    visible: bool
    min_value: int
    created_at: datetime


class RaffleListResponse(ApiModel):
    raffles: list[RaffleOut]
    total_sold: int


class VisibilityResponse(ApiModel):
    message: str
    visible: bool


class TicketCreate(ApiModel):
    number_tickets: int = Field(..., ge=1, le=10_000)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=200)
    payment_method: Optional[str] = Field(None, max_length=50)
    amount_paid: Optional[str] = Field(None, max_length=50)
    voucher: Optional[str] = Field(None, max_length=300)


class TicketOut(ApiModel):
    id: int
    number_tickets: int
    full_name: str
    email: str
    phone: Optional[str]
    reference: Optional[str]
    payment_method: Optional[str]
    amount_paid: Optional[str]
    voucher: Optional[str] = None
    created_at: datetime
    approved: bool
    approval_codes: list[str]


class TicketPublic(ApiModel):
    id: int
    number_tickets: int
    full_name: str
    email: str
    phone: Optional[str]
    reference: Optional[str]
    payment_method: Optional[str]
    amount_paid: Optional[str]
    created_at: datetime
    approved: bool
    approval_codes: list[str]


class ApprovalResponse(ApiModel):
    message: str
    approval_codes: list[str]


class ContactUpdate(ApiModel):
    new_email: Optional[EmailStr] = None
    new_phone: Optional[str] = Field(None, max_length=50)


class TopBuyer(ApiModel):
    email: str
    full_name: str
    phone: Optional[str]
    total_tickets: int
    purchases: int


class SoldNumbersResponse(ApiModel):
    all_sold_numbers: list[str]
    total_sold: int


class CodeCheckResponse(ApiModel):
    sold: bool
    message: Optional[str] = None
    data: Optional[TicketPublic] = None


class BuyerCodes(ApiModel):
    id: int
    full_name: str
    email: str
    tickets: list[str]


class EmailCheckResponse(ApiModel):
    success: bool
    data: list[BuyerCodes]


class UploadResponse(ApiModel):
    filename: str
    url: str
