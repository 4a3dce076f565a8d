"""JSON API for the payment schedule."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from paydash.auth import User
from paydash.core.formatting import format_month_label, parse_month_param
from paydash.core.schedule import InvalidStatus
from paydash.dependencies import get_schedule_service, get_today
from paydash.routers.auth import get_current_user
from paydash.schemas import PaymentRead, ScheduleSummaryRead, StatusUpdate, StoredPaymentRead
from paydash.services import PaymentScheduleService

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.get("", response_model=list[PaymentRead])
def list_payments(
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
):
    return [record.as_dict() for record in service.series(today)]


@router.get("/summary", response_model=ScheduleSummaryRead)
def payment_summary(
    month: str | None = None,
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
):
    try:
        year, month_number = parse_month_param(month, today)
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be provided in YYYY-MM format")
    summary = service.summary(today, year, month_number).as_dict()
    summary["month_label"] = format_month_label(year, month_number)
    return summary


@router.put("/{payment_date}", response_model=StoredPaymentRead)
def update_payment(
    payment_date: str,
    payload: StatusUpdate,
    service: PaymentScheduleService = Depends(get_schedule_service),
    user: User = Depends(get_current_user),
):
    _ = user
    try:
        payment = service.set_status(payment_date, payload.status)
    except InvalidStatus:
        raise HTTPException(status_code=400, detail="Invalid status")
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment
