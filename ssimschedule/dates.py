"""Date and time helpers shared by the parser and the expander.

SSIM encodes dates as ``DDMMMYY`` (``13FEB25``), clock times as ``HHMM`` and
UTC variations as ``+HHMM`` / ``-HHMM``. Everything here returns ``None`` on
malformed input instead of raising, callers decide on the fallback.
"""
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator

SSIM_DATE_RE = re.compile(r'(\d{2})([A-Za-z]{3})(\d{2})', re.ASCII)
SSIM_TIME_RE = re.compile(r'\d{4}', re.ASCII)
UTC_OFFSET_RE = re.compile(r'([+-])(\d{2})(\d{2})', re.ASCII)

MONTHS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}

ALL_WEEKDAYS: frozenset[int] = frozenset(range(1, 8))


def parse_ssim_date(value: str | None) -> date | None:
    """Parse ``DDMMMYY`` into a date, two-digit years map to 20YY."""
    if not value:
        return None
    match = SSIM_DATE_RE.fullmatch(value.strip())
    if not match:
        return None
    day, month_code, year = match.groups()
    month = MONTHS.get(month_code.upper())
    if month is None:
        return None
    try:
        return date(2000 + int(year), month, int(day))
    except ValueError:
        return None


def parse_ssim_time(value: str | None) -> time | None:
    if not value or not SSIM_TIME_RE.fullmatch(value):
        return None
    hour, minute = int(value[:2]), int(value[2:])
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_utc_offset(value: str | None) -> timedelta | None:
    """``+0300`` -> ``timedelta(hours=3)``; anything else -> None."""
    if not value:
        return None
    match = UTC_OFFSET_RE.fullmatch(value.strip())
    if not match:
        return None
    sign, hours, minutes = match.groups()
    if int(minutes) > 59:
        return None
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return -delta if sign == '-' else delta


def parse_operating_days(value: str | None) -> frozenset[int]:
    """Collect weekday digits 1..7 (Monday=1), ignoring padding and noise."""
    if not value:
        return frozenset()
    return frozenset(int(char) for char in value if char in '1234567')


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    current = start
    one_day = timedelta(days=1)
    while current <= end:
        yield current
        current += one_day


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f'Expected date or datetime, got {type(value).__name__}')


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def format_duration(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    return f'{hours:02d}:{rest:02d}'
