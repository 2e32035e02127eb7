"""Pickup date parsing for carrier exports.

Recognised forms, tried in order:

1. ISO date ``2025-07-07``
2. Delhivery date-time ``28-07-2025 07:48`` (time ignored)
3. BlueDart ``07-Jul-25`` (two-digit years are 20xx)
4. Any other ISO 8601 timestamp

Recognised calendar dates come back as UTC midnight. Anything unparseable
falls back to the current time and logs a warning; callers never see an error.
"""

import logging
import re
from datetime import datetime, timezone

logger = logging.getLogger("courier_recon.normalizers.dates")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_ABBREVIATIONS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4,
    "May": 5, "Jun": 6, "Jul": 7, "Aug": 8,
    "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}


def _utc_midnight(year: str, month: int | str, day: str) -> datetime | None:
    if not (len(year) == 4 and year.isdigit()):
        return None
    if isinstance(month, str) and not (month.isdigit() and len(month) <= 2):
        return None
    if not (day.isdigit() and len(day) <= 2):
        return None
    try:
        return datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
    except ValueError:
        return None


def _parse_day_month_year_time(value: str) -> datetime | None:
    if " " not in value or "-" not in value or len(value.split("-")) != 3:
        return None
    parts = value.split(" ")[0].split("-")
    if len(parts) != 3:
        return None
    day, month, year = parts
    return _utc_midnight(year, month, day)


def _parse_day_month_name_year(value: str) -> datetime | None:
    if "-" not in value or " " in value:
        return None
    parts = [p.strip() for p in value.split("-")]
    if len(parts) != 3:
        return None
    day, month_name, year = parts
    month = MONTH_ABBREVIATIONS.get(month_name)
    if month is None:
        return None
    if len(year) == 2:
        year = f"20{year}"
    return _utc_midnight(year, month, day)


def _parse_iso_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: str | None) -> datetime:
    """Parse a carrier pickup date. Never raises.

    Args:
        value: Raw pickup date text as exported by either carrier.

    Returns:
        Timezone-aware UTC datetime. Blank or unrecognised input gives the
        current time.
    """
    text = (value or "").strip()
    if not text:
        logger.debug("Empty pickup date, using current time")
        return datetime.now(timezone.utc)

    if _ISO_DATE.match(text):
        parsed = _utc_midnight(text[:4], text[5:7], text[8:10])
        if parsed is not None:
            return parsed

    for parser in (_parse_day_month_year_time, _parse_day_month_name_year, _parse_iso_timestamp):
        parsed = parser(text)
        if parsed is not None:
            return parsed

    logger.warning("Unparseable pickup date %r, using current time", text)
    return datetime.now(timezone.utc)
