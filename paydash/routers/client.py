"""Read-only client view shared by the admin."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request

from paydash.core.formatting import parse_month_param
from paydash.dependencies import get_schedule_service, get_today, templates
from paydash.services import PaymentScheduleService

router = APIRouter(tags=["Client"])


@router.get("/client", name="client_view")
def client_view(
    request: Request,
    month: str | None = None,
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
):
    try:
        year, month_number = parse_month_param(month, today)
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be provided in YYYY-MM format")
    context = service.month_view(today, year, month_number)
    return templates.TemplateResponse(request, "client/index.html", context)
