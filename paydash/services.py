"""Application service layer."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from paydash import crud
from paydash.config import DEFAULT_STATUS_POLICY, SCHEDULE
from paydash.core.formatting import (
    format_day_badge,
    format_display_date,
    format_month_label,
    month_param,
    shift_month,
)
from paydash.core.schedule import (
    DefaultStatusPolicy,
    PaymentRecord,
    PaymentStatus,
    ScheduleConfig,
    ScheduleSummary,
    reconcile,
    summarize,
)
from paydash.models import Payment

logger = logging.getLogger(__name__)


def _neighbour_month(year: int, month: int, offset: int) -> Optional[str]:
    # None at the edges of the supported date range
    try:
        return month_param(*shift_month(year, month, offset))
    except (ValueError, OverflowError):
        return None


def _record_view(record: PaymentRecord) -> Dict[str, Any]:
    day, month_abbr = format_day_badge(record.date)
    return {
        "date": record.key,
        "amount": record.amount,
        "status": record.status.value,
        "status_label": record.status.label,
        "day": day,
        "month_abbr": month_abbr,
        "display_date": format_display_date(record.date),
    }


class PaymentScheduleService:
    """Combines stored statuses with the generated schedule."""

    def __init__(
        self,
        db: Session,
        config: ScheduleConfig = SCHEDULE,
        policy: DefaultStatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> None:
        self.db = db
        self.config = config
        self.policy = policy

    def series(self, today: date) -> List[PaymentRecord]:
        generated = self.config.generate(now=today, policy=self.policy)
        return reconcile(generated, crud.load_override_map(self.db))

    def summary(self, today: date, year: int, month: int) -> ScheduleSummary:
        return summarize(self.series(today), today, year, month)

    def set_status(self, payment_date: str, status: str | PaymentStatus) -> Payment | None:
        payment = crud.update_payment_status(self.db, payment_date, status)
        if payment is None:
            logger.info("No stored payment for %s", payment_date)
        else:
            logger.info("Payment %s marked %s", payment.date, payment.status)
        return payment

    def month_view(self, today: date, year: int, month: int) -> Dict[str, Any]:
        """Template context for one month of the schedule."""

        summary = self.summary(today, year, month)
        return {
            "month": month_param(year, month),
            "month_label": format_month_label(year, month),
            "prev_month": _neighbour_month(year, month, -1),
            "next_month": _neighbour_month(year, month, 1),
            "payments": [_record_view(record) for record in summary.monthly_payments],
            "monthly_received": summary.monthly_received,
            "total_paid": summary.total_paid,
            "overdue": [_record_view(record) for record in summary.overdue],
            "total_overdue": summary.total_overdue,
            "next_payment": _record_view(summary.next_payment) if summary.next_payment else None,
            "counts": summary.counts,
            "payment_amount": self.config.amount,
            "statuses": [member.value for member in PaymentStatus],
        }
