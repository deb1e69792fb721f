"""Typed value extraction from raw export cells."""

from __future__ import annotations

import re
from datetime import datetime

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

SUCCEEDED_STATUS = "succeeded"
DEFAULT_MONTHS_BACK = 12

# Fills components a partial date leaves out ("2024", "March 2025").
_PARTIAL_DATE_DEFAULT = datetime(2001, 1, 1)

_AMOUNT_NOISE =re.compile(r"[$,]")
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def clean_cell(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip()


def parse_amount(value: str | None) -> float:
    """Parse a money cell such as ``"$1,234.56"``; anything unreadable is 0."""
    if not value:
        return 0.0

    cleaned = _AMOUNT_NOISE.sub("", value)
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0


def parse_date(value: str | None) -> datetime | None:
    """Parse a transaction date as naive local time, or ``None`` when unreadable."""
    text = clean_cell(value)
    if not text:
        return None

    try:
        parsed = date_parser.parse(text, default=_PARTIAL_DATE_DEFAULT)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        return None
    return parsed


def status_allows(status: str | None) -> bool:
    """Only succeeded transactions count; an empty status is not filtered."""
    text = clean_cell(status).lower()
    return not text or text == SUCCEEDED_STATUS


def recency_cutoff(months_back: int = DEFAULT_MONTHS_BACK, now: datetime | None = None) -> datetime:
    if months_back < 0:
        raise ValueError("Months back must be zero or greater.")
    anchor = now if now is not None else datetime.now()
    return anchor - relativedelta(months=months_back)


def within_period(occurred_at: datetime | None, cutoff: datetime) -> bool:
    # Dateless rows always count.
    if occurred_at is None:
        return True
    return occurred_at >= cutoff
