# utils/dates.py
import datetime
import math
import re

import dateutil.parser

DATE_ONLY = re.compile(r'^\d{4}-\d{2}-\d{2}$')
END_OF_DAY = datetime.time(23, 59, 59, 999000)


def local_naive(dt):
    # aware datetimes (Firestore timestamps, "...Z" strings) are compared in local time
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def _day_span(day, end_of_day):
    return datetime.datetime.combine(day, END_OF_DAY if end_of_day else datetime.time.min)


def to_instant(value, end_of_day=False):
    """
    Resolves a stored or user-entered date into a local naive datetime.

    Date-only values (``date`` objects, ``YYYY-MM-DD`` strings) expand to the
    whole day: local midnight for a start bound, 23:59:59.999 for an end bound.
    Values carrying a time of day are kept as they are. Numbers are epoch
    milliseconds. Returns None for anything that is not a finite instant.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime.datetime):
        return local_naive(value)

    if isinstance(value, datetime.date):
        return _day_span(value, end_of_day)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.datetime.fromtimestamp(value / 1000.0)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if DATE_ONLY.match(s):
            try:
                return _day_span(datetime.date.fromisoformat(s), end_of_day)
            except ValueError:
                return None
        try:
            return local_naive(dateutil.parser.isoparse(s))
        except (ValueError, OverflowError):
            return None

    return None


def to_date(value):
    """Calendar date of a stored/user-entered value, or None."""
    instant = to_instant(value)
    return instant.date() if instant else None


def ranges_overlap(a_start, a_end, b_start, b_end):
    """
    Inclusive overlap test of [a_start, a_end] and [b_start, b_end].

    A trip ending on the day another starts overlaps it. Returns False when
    any bound cannot be resolved, so malformed records never block anything.
    """
    a0 = to_instant(a_start)
    a1 = to_instant(a_end, end_of_day=True)
    b0 = to_instant(b_start)
    b1 = to_instant(b_end, end_of_day=True)
    if a0 is None or a1 is None or b0 is None or b1 is None:
        return False
    return a0 <= b1 and a1 >= b0
