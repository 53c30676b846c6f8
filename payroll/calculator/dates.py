# ==============================================================================
# payroll/calculator/dates.py
# ------------------------------------------------------------------------------
# Turns a single spreadsheet cell into a calendar date.
#
# Sheets hand us ISO strings, compact 8-digit dates, English month names,
# ambiguous A/B/YYYY slashes, spreadsheet serial numbers and millisecond
# timestamps, sometimes all in the same column. normalize() tries the formats
# in a fixed priority order and returns None when nothing fits. It never
# raises: callers skip the row.
# ==============================================================================

import calendar
import math
import numbers
import re
import warnings
from datetime import date, datetime, timedelta

import pandas as pd

# Exclusive bounds. A bare month number such as 3 would otherwise be read as
# a January-1900 serial.
MIN_PLAUSIBLE_YEAR = 1900
MAX_PLAUSIBLE_YEAR = 2100

SERIAL_EPOCH = date(1899, 12, 30)
MAX_SERIAL = 100000
MIN_TIMESTAMP_MS = 1_000_000_000
MAX_TIMESTAMP_MS = 10_000_000_000_000

_ISO_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')
_COMPACT_RE = re.compile(r'^(\d{4})(\d{2})(\d{2})$')
_DAY_MONTH_YEAR_RE = re.compile(r'^(\d{1,2})\s+([A-Za-z]+)\.?,?\s+(\d{4})\b')
_MONTH_DAY_YEAR_RE = re.compile(r'^([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})\b')
_SLASH_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})\b')
_NUMERIC_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)$')
_DIGIT_RE = re.compile(r'\d')

_MONTHS = {
    'january': 1, 'february': 2, 'march': 3, 'april': 4, 'may': 5, 'june': 6,
    'july': 7, 'august': 8, 'september': 9, 'october': 10, 'november': 11, 'december': 12,
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'jun': 6, 'jul': 7, 'aug': 8,
    'sep': 9, 'sept': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}


def _is_plausible(d):
    return MIN_PLAUSIBLE_YEAR < d.year < MAX_PLAUSIBLE_YEAR


def _build(year, month, day):
    """date(year, month, day) or None; the constructor is the round-trip check."""
    try:
        return date(int(year), int(month), int(day))
    except (ValueError, OverflowError):
        return None


def _parse_iso(text):
    match = _ISO_RE.match(text)
    if not match:
        return None
    return _build(*match.groups())


def _parse_compact(text):
    match = _COMPACT_RE.match(text)
    if not match:
        return None
    return _build(*match.groups())


def _parse_textual(text):
    match = _DAY_MONTH_YEAR_RE.match(text)
    if match:
        day, month_name, year = match.groups()
    else:
        match = _MONTH_DAY_YEAR_RE.match(text)
        if not match:
            return None
        month_name, day, year = match.groups()
    month = _MONTHS.get(month_name.lower())
    if month is None:
        return None
    return _build(year, month, day)


def _parse_slash(text):
    match = _SLASH_RE.match(text)
    if not match:
        return None
    first, second, year = (int(part) for part in match.groups())
    if first > 12:
        return _build(year, second, first)
    if second > 12:
        return _build(year, first, second)
    # Ambiguous: month-first wins when both read as valid dates.
    return _build(year, first, second) or _build(year, second, first)


def _parse_generic(text):
    # Digit-free text such as "today" or "now" is never read as a date.
    if _NUMERIC_RE.match(text) or not _DIGIT_RE.search(text):
        return None
    try:
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            parsed = pd.to_datetime(text, errors='coerce')
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    result = parsed.date()
    return result if _is_plausible(result) else None


def _parse_serial(text):
    if not _NUMERIC_RE.match(text):
        return None
    value = float(text)
    if not 1 <= value < MAX_SERIAL:
        return None
    result = SERIAL_EPOCH + timedelta(days=int(value))
    return result if _is_plausible(result) else None


def _parse_timestamp(text):
    if not _NUMERIC_RE.match(text):
        return None
    value = float(text)
    if not MIN_TIMESTAMP_MS < value < MAX_TIMESTAMP_MS:
        return None
    try:
        result = datetime.fromtimestamp(value / 1000).date()
    except (OSError, OverflowError, ValueError):
        return None
    return result if _is_plausible(result) else None


_PARSERS = (
    _parse_iso,
    _parse_compact,
    _parse_textual,
    _parse_slash,
    _parse_generic,
    _parse_serial,
    _parse_timestamp,
)


def _number_text(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, numbers.Integral):
        return str(int(value))
    return repr(float(value))


def normalize(raw):
    """
    Converts one cell value into a datetime.date.

    Args:
        raw: str, int, float, date, datetime or pandas Timestamp.

    Returns:
        datetime.date, or None when the value is not a recognizable date.
    """
    if raw is None or isinstance(raw, bool) or raw is pd.NaT:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, numbers.Real):
        if math.isnan(raw) or math.isinf(raw):
            return None
        text = _number_text(raw)
    elif isinstance(raw, str):
        text = raw.strip()
    else:
        return None

    if not text:
        return None
    for parser in _PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


def as_date(value):
    """Like normalize(), but for trusted inputs: raises ValueError instead of returning None."""
    parsed = normalize(value)
    if parsed is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return parsed


def month_bounds(year, month):
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_period(year, month):
    if not 1 <= int(month) <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month_bounds(int(year), int(month))


def iter_days(start, end):
    """Yields every calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
