from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from booking_ops.application.exceptions import InvalidDate, ValidationError
from booking_ops.domain.entities.calendar import CalendarCell, Granularity

WEEK_LENGTH = 7
MONTH_GRID_LENGTH = 35  # five fixed weeks; six-week months lose their trailing days

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_iso_date(value: date | str) -> date:
    """Parse YYYY-MM-DD. datetime values are truncated to their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not _ISO_DATE.match(text):
        raise InvalidDate(f"Expected a YYYY-MM-DD date, got {value!r}")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidDate(f"Not a calendar date: {value!r}")


def parse_hhmm(value: time | str) -> time:
    if isinstance(value, time):
        return value
    match = _HHMM.match(str(value or "").strip())
    if not match:
        raise InvalidDate(f"Expected a 24-hour HH:MM time, got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def coerce_granularity(value: Granularity | str) -> Granularity:
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown calendar granularity: {value!r}")


def week_start(day: date) -> date:
    """Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def build_grid(reference_date: date | str, granularity: Granularity | str) -> list[date]:
    """Ordered dates of the calendar view containing `reference_date`."""
    ref = parse_iso_date(reference_date)
    view = coerce_granularity(granularity)

    if view == Granularity.day:
        return [ref]

    if view == Granularity.month:
        start = week_start(ref.replace(day=1))
        return [start + timedelta(days=i) for i in range(MONTH_GRID_LENGTH)]

    # week and list views share the Monday-first seven day window
    start = week_start(ref)
    return [start + timedelta(days=i) for i in range(WEEK_LENGTH)]


def build_cells(
    reference_date: date | str,
    granularity: Granularity | str,
    today: date | None = None,
    timezone: ZoneInfo | None = None,
) -> list[CalendarCell]:
    ref = parse_iso_date(reference_date)
    view = coerce_granularity(granularity)
    if today is None:
        today = datetime.now(timezone).date() if timezone else date.today()

    return [
        CalendarCell(
            date=day,
            is_current_period=_in_period(day, ref, view),
            is_today=day == today,
        )
        for day in build_grid(ref, view)
    ]


def shift_reference(reference_date: date | str, granularity: Granularity | str, steps: int) -> date:
    """Move the reference date by `steps` views (previous/next navigation)."""
    ref = parse_iso_date(reference_date)
    view = coerce_granularity(granularity)
    if view == Granularity.day:
        return ref + timedelta(days=steps)
    if view == Granularity.month:
        month_index = ref.month - 1 + steps
        year = ref.year + month_index // 12
        month = month_index % 12 + 1
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(ref.day, last_day))
    return ref + timedelta(weeks=steps)


def _in_period(day: date, ref: date, view: Granularity) -> bool:
    if view == Granularity.month:
        return (day.year, day.month) == (ref.year, ref.month)
    return True
