"""Admin dashboard routes."""
from __future__ import annotations

import csv
from datetime import date, datetime
from io import StringIO
from typing import Iterable

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse, Response, StreamingResponse

from paydash.auth import User
from paydash.core.formatting import month_param, parse_month_param
from paydash.core.schedule import InvalidStatus, PaymentRecord
from paydash.dependencies import get_schedule_service, get_today, templates
from paydash.exporting import export_schedule_workbook
from paydash.routers.auth import get_admin_user, get_current_user
from paydash.services import PaymentScheduleService

router = APIRouter(tags=["Dashboard"])


def _resolve_month(value: str | None, today: date) -> tuple[int, int]:
    try:
        return parse_month_param(value, today)
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be provided in YYYY-MM format")


@router.get("/dashboard")
def dashboard(
    request: Request,
    month: str | None = None,
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
    user: User = Depends(get_current_user),
):
    year, month_number = _resolve_month(month, today)
    context = service.month_view(today, year, month_number)
    context.update(
        {
            "user": user,
            "client_link": str(request.url_for("client_view")),
        }
    )
    return templates.TemplateResponse(request, "dashboard/index.html", context)


@router.post("/dashboard/payments/{payment_date}")
def update_payment_status(
    payment_date: str,
    status: str = Form(...),
    month: str | None = Form(default=None),
    service: PaymentScheduleService = Depends(get_schedule_service),
    user: User = Depends(get_current_user),
):
    _ = user
    try:
        payment = service.set_status(payment_date, status)
    except InvalidStatus:
        raise HTTPException(status_code=400, detail="Invalid status")
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")

    target_month = month or month_param(payment.pay_date.year, payment.pay_date.month)
    return RedirectResponse(url=f"/dashboard?month={target_month}", status_code=303)


def _iter_export_rows(records: Iterable[PaymentRecord]) -> Iterable[list[str]]:
    yield ["date", "amount", "status"]
    for record in records:
        yield [record.key, f"{record.amount:.2f}", record.status.value]


@router.get("/dashboard/export")
def export_schedule_csv(
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
    user: User = Depends(get_current_user),
) -> StreamingResponse:
    _ = user  # ensure the user is authenticated but not otherwise used
    buffer = StringIO()
    writer = csv.writer(buffer)
    for row in _iter_export_rows(service.series(today)):
        writer.writerow(row)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"payment_schedule_{timestamp}.csv"
    csv_bytes = buffer.getvalue().encode("utf-8-sig")
    response = StreamingResponse(iter([csv_bytes]), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


@router.get("/dashboard/export-xlsx")
def export_schedule_xlsx(
    service: PaymentScheduleService = Depends(get_schedule_service),
    today: date = Depends(get_today),
    user: User = Depends(get_admin_user),
) -> Response:
    _ = user
    content = export_schedule_workbook(service.series(today))
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"payment_schedule_{timestamp}.xlsx"
    return Response(
        content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
