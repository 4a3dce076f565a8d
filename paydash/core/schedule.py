"""Bi-weekly payment schedule generation and status reconciliation.

Everything here is pure: no database, no clock reads. Callers pass "now"
explicitly and own persistence of the override map.
"""
from __future__ import annotations

import calendar
import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

MONEY_QUANT = Decimal("0.01")

DEFAULT_ANCHOR = date(2025, 10, 31)
DEFAULT_INTERVAL_DAYS = 14
DEFAULT_HORIZON = date(2028, 12, 31)
DEFAULT_AMOUNT = Decimal("300.00")


class ScheduleError(Exception):
    """Base class for schedule engine errors."""


class InvalidStatus(ScheduleError, ValueError):
    """Raised when a status outside paid/due/nothing is written."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid status {value!r}; expected one of paid, due, nothing.")


class MalformedOverrideSource(ScheduleError):
    """Raised when the stored override map cannot be parsed."""


class PaymentStatus(str, Enum):
    PAID = "paid"
    DUE = "due"
    NOTHING = "nothing"

    @classmethod
    def parse(cls, value: Any, default: Optional["PaymentStatus"] = None) -> Optional["PaymentStatus"]:
        """Return the matching member, or ``default`` for anything unrecognized."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return default
        try:
            return cls(value)
        except ValueError:
            return default

    @property
    def label(self) -> str:
        return self.value.title()


STATUS_ENUM = tuple(member.value for member in PaymentStatus)


class DefaultStatusPolicy(str, Enum):
    """How generated records are initialized before overrides apply."""

    NOTHING = "nothing"
    TIME_DERIVED = "time_derived"

    def status_for(self, payment_date: date, now: Optional[date]) -> PaymentStatus:
        if self is DefaultStatusPolicy.NOTHING:
            return PaymentStatus.NOTHING
        if now is None:
            raise ValueError("A reference date is required for the time_derived policy.")
        return PaymentStatus.PAID if payment_date < now else PaymentStatus.DUE


@dataclass(frozen=True)
class PaymentRecord:
    """One scheduled payment."""

    date: date
    amount: Decimal
    status: PaymentStatus = PaymentStatus.NOTHING

    @property
    def key(self) -> str:
        return self.date.isoformat()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.key,
            "amount": self.amount,
            "status": self.status.value,
        }


def _quantize(amount: Any) -> Decimal:
    return Decimal(str(amount)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def generate(
    anchor: date,
    interval_days: int,
    horizon: date,
    amount: Any,
    now: Optional[date] = None,
    policy: DefaultStatusPolicy = DefaultStatusPolicy.NOTHING,
) -> List[PaymentRecord]:
    """Build the ascending series anchor, anchor + interval, ... up to horizon inclusive."""

    if not isinstance(interval_days, int) or interval_days <= 0:
        raise ValueError("interval_days must be a positive integer.")
    policy = DefaultStatusPolicy(policy)
    if policy is DefaultStatusPolicy.TIME_DERIVED and now is None:
        raise ValueError("A reference date is required for the time_derived policy.")

    value = _quantize(amount)
    step = timedelta(days=interval_days)
    records: List[PaymentRecord] = []
    current = anchor
    while current <= horizon:
        records.append(PaymentRecord(date=current, amount=value, status=policy.status_for(current, now)))
        current += step
    return records


@dataclass(frozen=True)
class ScheduleConfig:
    """Fixed generation rule for the payment series."""

    anchor: date = DEFAULT_ANCHOR
    interval_days: int = DEFAULT_INTERVAL_DAYS
    horizon: date = DEFAULT_HORIZON
    amount: Decimal = DEFAULT_AMOUNT

    def __post_init__(self) -> None:
        if not isinstance(self.interval_days, int) or self.interval_days <= 0:
            raise ValueError("interval_days must be a positive integer.")
        if _quantize(self.amount) <= 0:
            raise ValueError("amount must be positive.")

    def generate(
        self,
        now: Optional[date] = None,
        policy: DefaultStatusPolicy = DefaultStatusPolicy.NOTHING,
    ) -> List[PaymentRecord]:
        return generate(self.anchor, self.interval_days, self.horizon, self.amount, now=now, policy=policy)


def reconcile(series: Sequence[PaymentRecord], overrides: Any) -> List[PaymentRecord]:
    """Apply valid overrides onto ``series`` and return a new list."""

    if not isinstance(overrides, Mapping):
        if overrides is not None:
            logger.warning("Ignoring override source of type %s", type(overrides).__name__)
        return list(series)

    reconciled: List[PaymentRecord] = []
    for record in series:
        raw = overrides.get(record.key)
        if raw is None:
            reconciled.append(record)
            continue
        status = PaymentStatus.parse(raw)
        if status is None:
            logger.debug("Skipping invalid override %r for %s", raw, record.key)
            reconciled.append(record)
            continue
        reconciled.append(record if record.status is status else replace(record, status=status))
    return reconciled


def load_overrides(raw: Optional[str]) -> Dict[str, str]:
    """Parse the stored JSON object form of an override map."""

    if raw is None or raw == "":
        return {}
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedOverrideSource(f"Override source is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedOverrideSource("Override source must be a JSON object.")
    return {str(key): value for key, value in data.items()}


def dump_overrides(overrides: Mapping[str, Any]) -> str:
    return json.dumps(
        {
            key: value.value if isinstance(value, PaymentStatus) else value
            for key, value in overrides.items()
        },
        sort_keys=True,
    )


def reconcile_raw(series: Sequence[PaymentRecord], raw: Optional[str]) -> List[PaymentRecord]:
    """Reconcile against a serialized override map, falling back to ``series`` if it is corrupt."""

    try:
        overrides = load_overrides(raw)
    except MalformedOverrideSource as exc:
        logger.warning("Falling back to generated schedule: %s", exc)
        return list(series)
    return reconcile(series, overrides)


def overrides_from_series(series: Iterable[PaymentRecord]) -> Dict[str, str]:
    return {record.key: record.status.value for record in series}


def set_status(overrides: Mapping[str, str], payment_date: Any, new_status: Any) -> Dict[str, str]:
    """Return a copy of ``overrides`` with ``payment_date`` set to ``new_status``."""

    status = PaymentStatus.parse(new_status)
    if status is None:
        raise InvalidStatus(new_status)
    key = payment_date.isoformat() if isinstance(payment_date, date) else str(payment_date)
    updated = dict(overrides)
    updated[key] = status.value
    return updated


# --- Aggregation ---------------------------------------------------------


def monthly_filter(series: Iterable[PaymentRecord], year: int, month: int) -> List[PaymentRecord]:
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    return [record for record in series if first <= record.date <= last]


def sum_by_status(series: Iterable[PaymentRecord], status: Any) -> Decimal:
    wanted = PaymentStatus.parse(status)
    total = Decimal("0.00")
    if wanted is None:
        return total
    for record in series:
        if record.status is wanted:
            total += record.amount
    return total


def overdue(series: Iterable[PaymentRecord], now: date) -> List[PaymentRecord]:
    return [record for record in series if record.status is PaymentStatus.DUE and record.date <= now]


def next_upcoming(series: Iterable[PaymentRecord], now: date) -> Optional[PaymentRecord]:
    candidates = [
        record
        for record in series
        if record.date > now and record.status in (PaymentStatus.DUE, PaymentStatus.NOTHING)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda record: record.date)


@dataclass
class ScheduleSummary:
    """Figures shown on the dashboard and client view cards."""

    year: int
    month: int
    monthly_payments: List[PaymentRecord] = field(default_factory=list)
    monthly_received: Decimal = Decimal("0.00")
    total_paid: Decimal = Decimal("0.00")
    overdue: List[PaymentRecord] = field(default_factory=list)
    total_overdue: Decimal = Decimal("0.00")
    next_payment: Optional[PaymentRecord] = None
    counts: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "monthly_payments": [record.as_dict() for record in self.monthly_payments],
            "monthly_received": self.monthly_received,
            "total_paid": self.total_paid,
            "overdue": [record.as_dict() for record in self.overdue],
            "total_overdue": self.total_overdue,
            "next_payment": self.next_payment.as_dict() if self.next_payment else None,
            "counts": dict(self.counts),
        }


def summarize(series: Sequence[PaymentRecord], now: date, year: int, month: int) -> ScheduleSummary:
    monthly = monthly_filter(series, year, month)
    late = overdue(series, now)
    counts = {member.value: 0 for member in PaymentStatus}
    for record in series:
        counts[record.status.value] += 1
    return ScheduleSummary(
        year=year,
        month=month,
        monthly_payments=monthly,
        monthly_received=sum_by_status(monthly, PaymentStatus.PAID),
        total_paid=sum_by_status(series, PaymentStatus.PAID),
        overdue=late,
        total_overdue=sum(record.amount for record in late) if late else Decimal("0.00"),
        next_payment=next_upcoming(series, now),
        counts=counts,
    )


__all__ = [
    "DefaultStatusPolicy",
    "InvalidStatus",
    "MalformedOverrideSource",
    "PaymentRecord",
    "PaymentStatus",
    "STATUS_ENUM",
    "ScheduleConfig",
    "ScheduleError",
    "ScheduleSummary",
    "dump_overrides",
    "generate",
    "load_overrides",
    "monthly_filter",
    "next_upcoming",
    "overdue",
    "overrides_from_series",
    "reconcile",
    "reconcile_raw",
    "set_status",
    "sum_by_status",
    "summarize",
]
