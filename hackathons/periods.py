# hackathons/periods.py
"""
Monthly virtual hackathon periods.

A period runs from the 1st of the month 00:00 to the 1st of the next month
00:00 in the hackathon time zone (Boston by default) and is identified as
"virtual-YYYY-MM". Every pool / team / submission row is scoped by it.
"""
import re
from datetime import datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from .exceptions import InvalidPeriodError

PERIOD_PREFIX = "virtual"
PERIOD_RE = re.compile(r"^virtual-(\d{4})-(\d{2})$")


def hackathon_tz() -> ZoneInfo:
    return ZoneInfo(getattr(settings, "HACKATHON_TIME_ZONE", "America/New_York"))


def now() -> datetime:
    """Single source of truth for "now" in hackathon code."""
    return timezone.now()


def _format(year: int, month: int) -> str:
    return f"{PERIOD_PREFIX}-{year:04d}-{month:02d}"


def period_id_for(dt: datetime) -> str:
    """Period containing `dt`; naive datetimes are read as hackathon-local time."""
    tz = hackathon_tz()
    local = dt.astimezone(tz) if timezone.is_aware(dt) else dt.replace(tzinfo=tz)
    return _format(local.year, local.month)


def current_period_id() -> str:
    return period_id_for(now())


def parse_period_id(period_id: str) -> Tuple[int, int]:
    match = PERIOD_RE.match(period_id or "")
    if not match:
        raise InvalidPeriodError(f"Invalid hackathon period: {period_id!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidPeriodError(f"Invalid hackathon period: {period_id!r}")
    return year, month


def is_period_id(value: Optional[str]) -> bool:
    try:
        parse_period_id(value)
    except InvalidPeriodError:
        return False
    return True


def resolve_period_id(value: Optional[str] = None) -> str:
    """Validate an explicit period id, or fall back to the current one."""
    if not value:
        return current_period_id()
    parse_period_id(value)
    return value


def next_period_id(period_id: str) -> str:
    year, month = parse_period_id(period_id)
    if month == 12:
        return _format(year + 1, 1)
    return _format(year, month + 1)


def previous_period_id(period_id: str) -> str:
    year, month = parse_period_id(period_id)
    if month == 1:
        return _format(year - 1, 12)
    return _format(year, month - 1)


def compare_periods(a: str, b: str) -> int:
    """-1, 0 or 1 as period `a` is before, equal to or after period `b`."""
    pa, pb = parse_period_id(a), parse_period_id(b)
    return (pa > pb) - (pa < pb)


def period_start(period_id: str) -> datetime:
    year, month = parse_period_id(period_id)
    return datetime(year, month, 1, tzinfo=hackathon_tz())


def submission_cutoff(period_id: str) -> datetime:
    """1st of the following month, 00:00 local. Commits after this disqualify."""
    return period_start(next_period_id(period_id))


def is_before_cutoff(period_id: str, at: Optional[datetime] = None) -> bool:
    return (at or now()) < submission_cutoff(period_id)


def format_month(period_id: str) -> str:
    """'virtual-2025-06' -> '2025-06' for user-facing messages."""
    year, month = parse_period_id(period_id)
    return f"{year:04d}-{month:02d}"
