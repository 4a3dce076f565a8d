"""Payment schedule CLI.

Works against a JSON file holding the override map, the same shape the
browser dashboard keeps under its ``payment-statuses`` key, so the schedule
can be inspected, updated and exported without the web app.
"""
from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
from dateutil import parser as date_parser

from paydash.config import SCHEDULE, configure_logging
from paydash.core.formatting import format_display_date, format_month_label, parse_month_param
from paydash.core.schedule import DefaultStatusPolicy, InvalidStatus, reconcile, summarize
from paydash.core.storage import JsonFileStore, OverrideStore
from paydash.exporting import build_schedule_frames, write_schedule_files

DEFAULT_STORE = "payment-statuses.json"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(description="Inspect and update the bi-weekly payment schedule.")
    parser.add_argument("--store", default=DEFAULT_STORE, help=f"Override store file (default: {DEFAULT_STORE}).")
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in DefaultStatusPolicy],
        default=DefaultStatusPolicy.NOTHING.value,
        help="Default status for dates without an override (default: nothing).",
    )
    parser.add_argument("--today", help="Reference date in YYYY-MM-DD format (default: today).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print one month of the schedule with summary figures.")
    show.add_argument("--month", help="Target month in YYYY-MM format (default: current month).")

    set_cmd = subparsers.add_parser("set", help="Set the status for a scheduled date.")
    set_cmd.add_argument("date", help="Payment date in YYYY-MM-DD format.")
    set_cmd.add_argument("status", help="One of paid, due, nothing.")

    export = subparsers.add_parser("export", help="Write the full schedule to XLSX and CSV.")
    export.add_argument("--out", default="./dist", help="Output directory for generated files (default: ./dist).")
    return parser.parse_args(argv)


def _parse_day(value: str, flag: str) -> date:
    try:
        return date_parser.isoparse(value).date()
    except ValueError as exc:
        raise SystemExit(f"{flag} must be provided in YYYY-MM-DD format.") from exc


def print_month(records, today: date, year: int, month: int) -> None:
    """Print the month table and summary figures to stdout."""

    summary = summarize(records, today, year, month)
    print(format_month_label(year, month))
    payments_df, _ = build_schedule_frames(summary.monthly_payments)
    if payments_df.empty:
        print("No payments scheduled for the requested month.")
    else:
        print(payments_df.to_string(index=False))

    figures = pd.Series(
        {
            "Month received": f"{summary.monthly_received:.2f}",
            "Total received": f"{summary.total_paid:.2f}",
            "Overdue": f"{summary.total_overdue:.2f} ({len(summary.overdue)} payments)",
            "Next payment": format_display_date(summary.next_payment.date) if summary.next_payment else "none",
        }
    )
    print(figures.to_string())


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""

    configure_logging()
    args = parse_args(argv)
    today = _parse_day(args.today, "--today") if args.today else date.today()
    store = OverrideStore(JsonFileStore(Path(args.store)))

    if args.command == "set":
        payment_date = _parse_day(args.date, "date")
        try:
            store.set_status(payment_date, args.status.strip().lower())
        except InvalidStatus as exc:
            raise SystemExit(str(exc)) from exc
        if payment_date not in {record.date for record in SCHEDULE.generate()}:
            print(f"Warning: {payment_date.isoformat()} is not a scheduled payment date.")
        print(f"{payment_date.isoformat()} marked {args.status.strip().lower()}.")
        return

    records = reconcile(SCHEDULE.generate(now=today, policy=DefaultStatusPolicy(args.policy)), store.load())

    if args.command == "show":
        try:
            year, month = parse_month_param(args.month, today)
        except ValueError as exc:
            raise SystemExit("--month must be provided in YYYY-MM format.") from exc
        print_month(records, today, year, month)
    elif args.command == "export":
        path = write_schedule_files(records, Path(args.out))
        print(f"Exported {len(records)} payments to {path}.")


if __name__ == "__main__":
    main()
