"""Environment-driven settings for the payment dashboard."""
from __future__ import annotations

import logging
import os
from datetime import date
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

from paydash.core.schedule import (
    DEFAULT_AMOUNT,
    DEFAULT_ANCHOR,
    DEFAULT_HORIZON,
    DEFAULT_INTERVAL_DAYS,
    DefaultStatusPolicy,
    ScheduleConfig,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_date(name: str, default: date) -> date:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return date_parser.isoparse(raw.strip()).date()
    except (ValueError, OverflowError):
        logger.warning("Invalid date %r in %s, using %s", raw, name, default.isoformat())
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer %r in %s, using %s", raw, name, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using %s", name, default)
        return default
    return value


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        logger.warning("Invalid amount %r in %s, using %s", raw, name, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using %s", name, default)
        return default
    return value


def _env_policy(name: str) -> DefaultStatusPolicy:
    raw = (os.getenv(name) or DefaultStatusPolicy.NOTHING.value).strip().lower()
    try:
        return DefaultStatusPolicy(raw)
    except ValueError:
        logger.warning("Unknown default status policy %r in %s, using 'nothing'", raw, name)
        return DefaultStatusPolicy.NOTHING


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


SCHEDULE = ScheduleConfig(
    anchor=_env_date("PAYDASH_SCHEDULE_ANCHOR", DEFAULT_ANCHOR),
    interval_days=_env_int("PAYDASH_SCHEDULE_INTERVAL_DAYS", DEFAULT_INTERVAL_DAYS),
    horizon=_env_date("PAYDASH_SCHEDULE_HORIZON", DEFAULT_HORIZON),
    amount=_env_decimal("PAYDASH_PAYMENT_AMOUNT", DEFAULT_AMOUNT),
)
DEFAULT_STATUS_POLICY = _env_policy("PAYDASH_DEFAULT_STATUS_POLICY")

SESSION_TTL_HOURS = _env_int("PAYDASH_SESSION_TTL_HOURS", 24)
SESSION_COOKIE_NAME = "session_id"
SECURE_COOKIES = _env_flag("PAYDASH_SECURE_COOKIES")

ADMIN_USERNAME = os.getenv("PAYDASH_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("PAYDASH_ADMIN_PASSWORD", "admin")

LOG_LEVEL = os.getenv("PAYDASH_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once; later calls only adjust the level."""

    resolved = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    else:
        root.setLevel(resolved)
