from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Iterable, Sequence, Tuple

import pandas as pd

from paydash.core.schedule import PaymentRecord, PaymentStatus

PAYMENT_COLUMNS = ["Date", "Amount", "Status"]
MONTHLY_COLUMNS = ["Month", "Scheduled", "Paid", "Due", "Nothing", "Received", "Outstanding"]


def _payments_df(records: Iterable[PaymentRecord]) -> pd.DataFrame:
    rows = []
    for item in records:
        rows.append(
            {
                "Date": item.date,
                "Amount": float(item.amount),
                "Status": item.status.label,
            }
        )
    if not rows:
        return pd.DataFrame(columns=PAYMENT_COLUMNS)
    return pd.DataFrame(rows)


def _monthly_df(records: Sequence[PaymentRecord]) -> pd.DataFrame:
    rows = []
    by_month: dict[str, list[PaymentRecord]] = {}
    for item in records:
        by_month.setdefault(item.date.strftime("%Y-%m"), []).append(item)

    for month, items in sorted(by_month.items()):
        received = sum(float(item.amount) for item in items if item.status is PaymentStatus.PAID)
        outstanding = sum(float(item.amount) for item in items if item.status is PaymentStatus.DUE)
        rows.append(
            {
                "Month": month,
                "Scheduled": len(items),
                "Paid": sum(1 for item in items if item.status is PaymentStatus.PAID),
                "Due": sum(1 for item in items if item.status is PaymentStatus.DUE),
                "Nothing": sum(1 for item in items if item.status is PaymentStatus.NOTHING),
                "Received": received,
                "Outstanding": outstanding,
            }
        )
    if not rows:
        return pd.DataFrame(columns=MONTHLY_COLUMNS)
    return pd.DataFrame(rows)


def build_schedule_frames(records: Sequence[PaymentRecord]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Return the per-payment and per-month DataFrames for a reconciled series."""

    return _payments_df(records), _monthly_df(records)


def export_schedule_workbook(records: Sequence[PaymentRecord]) -> bytes:
    """Return an XLSX workbook (bytes) with Payments and Monthly sheets."""

    payments_df, monthly_df = build_schedule_frames(records)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        payments_df.to_excel(writer, sheet_name="Payments", index=False)
        monthly_df.to_excel(writer, sheet_name="Monthly", index=False)

    buffer.seek(0)
    return buffer.getvalue()


def write_schedule_files(records: Sequence[PaymentRecord], output_dir: Path, base_filename: str = "payment_schedule") -> Path:
    """Write the workbook and a companion CSV; returns the workbook path."""

    output_dir.mkdir(parents=True, exist_ok=True)
    excel_path = output_dir / f"{base_filename}.xlsx"
    excel_path.write_bytes(export_schedule_workbook(records))

    payments_df, _ = build_schedule_frames(records)
    payments_df.to_csv(output_dir / f"{base_filename}.csv", index=False)
    return excel_path
