"""Pydantic schemas for API requests and responses."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    def strip_username(cls, value: str) -> str:
        return value.strip()


class UserRead(BaseModel):
    id: int
    username: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    sessionId: str
    user: UserRead


class AuthStatus(BaseModel):
    authenticated: bool
    user: Optional[UserRead] = None


class StatusUpdate(BaseModel):
    # Checked against the status enum in the route so the API can answer 400.
    status: str


class PaymentRead(BaseModel):
    date: str
    amount: Decimal
    status: str

    @field_validator("amount")
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class StoredPaymentRead(PaymentRead):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScheduleSummaryRead(BaseModel):
    year: int
    month: int
    month_label: str
    monthly_payments: list[PaymentRead]
    monthly_received: Decimal
    total_paid: Decimal
    overdue: list[PaymentRead]
    total_overdue: Decimal
    next_payment: Optional[PaymentRead] = None
    counts: dict[str, int]
