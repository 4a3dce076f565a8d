from datetime import date, timedelta
from decimal import Decimal

import pytest

from paydash.core.schedule import (
    DefaultStatusPolicy,
    PaymentRecord,
    PaymentStatus,
    ScheduleConfig,
    generate,
)


def test_generate_starts_at_anchor_and_steps_two_weeks():
    records = generate(date(2025, 10, 31), 14, date(2025, 12, 31), 300)
    assert [record.date for record in records] == [
        date(2025, 10, 31),
        date(2025, 11, 14),
        date(2025, 11, 28),
        date(2025, 12, 12),
        date(2025, 12, 26),
    ]
    assert all(record.amount == Decimal("300.00") for record in records)
    assert all(record.status is PaymentStatus.NOTHING for record in records)


def test_generate_spacing_and_uniqueness_over_full_horizon():
    records = ScheduleConfig().generate()
    dates = [record.date for record in records]
    assert dates[0] == date(2025, 10, 31)
    assert dates[-1] <= date(2028, 12, 31)
    assert dates[-1] + timedelta(days=14) > date(2028, 12, 31)
    assert len(set(dates)) == len(dates)
    for earlier, later in zip(dates, dates[1:]):
        assert later - earlier == timedelta(days=14)


def test_generate_includes_horizon_when_it_lands_on_a_step():
    records = generate(date(2025, 1, 1), 14, date(2025, 1, 15), Decimal("10"))
    assert [record.date for record in records] == [date(2025, 1, 1), date(2025, 1, 15)]


def test_generate_is_deterministic_for_same_now():
    now = date(2025, 11, 20)
    first = generate(date(2025, 10, 31), 14, date(2026, 3, 1), 300, now=now, policy=DefaultStatusPolicy.TIME_DERIVED)
    second = generate(date(2025, 10, 31), 14, date(2026, 3, 1), 300, now=now, policy=DefaultStatusPolicy.TIME_DERIVED)
    assert first == second


def test_generate_anchor_after_horizon_is_empty():
    assert generate(date(2029, 1, 1), 14, date(2028, 12, 31), 300) == []


def test_time_derived_policy_marks_past_paid_and_rest_due():
    now = date(2025, 11, 14)
    records = generate(date(2025, 10, 31), 14, date(2025, 11, 28), 300, now=now, policy="time_derived")
    assert [record.status for record in records] == [
        PaymentStatus.PAID,
        PaymentStatus.DUE,  # same day as now is not in the past
        PaymentStatus.DUE,
    ]


def test_time_derived_policy_requires_now():
    with pytest.raises(ValueError):
        generate(date(2025, 10, 31), 14, date(2025, 12, 31), 300, policy=DefaultStatusPolicy.TIME_DERIVED)


@pytest.mark.parametrize("interval", [0, -14])
def test_generate_rejects_non_positive_interval(interval):
    with pytest.raises(ValueError):
        generate(date(2025, 10, 31), interval, date(2025, 12, 31), 300)


def test_schedule_config_rejects_non_positive_amount():
    with pytest.raises(ValueError):
        ScheduleConfig(amount=Decimal("0"))


def test_payment_record_as_dict_uses_iso_date():
    record = PaymentRecord(date=date(2025, 11, 14), amount=Decimal("300.00"), status=PaymentStatus.DUE)
    data = record.as_dict()
    assert data == {"date": "2025-11-14", "amount": Decimal("300.00"), "status": "due"}
    assert isinstance(data["amount"], Decimal)


def test_status_parse_falls_back_to_default():
    assert PaymentStatus.parse("paid") is PaymentStatus.PAID
    assert PaymentStatus.parse("PAID") is None
    assert PaymentStatus.parse("late", PaymentStatus.NOTHING) is PaymentStatus.NOTHING
    assert PaymentStatus.parse(None, PaymentStatus.DUE) is PaymentStatus.DUE
    assert PaymentStatus.parse(3) is None
