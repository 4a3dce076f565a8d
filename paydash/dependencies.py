"""Shared FastAPI dependencies."""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from fastapi import Depends
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from paydash.database import get_session
from paydash.services import PaymentScheduleService

TEMPLATES_PATH = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_PATH))


def _format_money(value) -> str:
    """Format numeric values with thousand separators and two decimals."""

    if value in (None, ""):
        decimal_value = Decimal("0")
    else:
        try:
            decimal_value = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            return str(value)

    decimal_value = decimal_value.quantize(Decimal("0.01"))
    return f"{decimal_value:,.2f}"


templates.env.filters["money"] = _format_money


def get_today() -> date:
    """Reference date for schedule summaries; overridden in tests."""

    return date.today()


def get_schedule_service(db: Session = Depends(get_session)) -> PaymentScheduleService:
    return PaymentScheduleService(db)
