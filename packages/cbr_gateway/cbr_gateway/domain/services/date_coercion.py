"""Date normalization for ``dateTime`` parameters.

The bank's services expect ``System.DateTime`` values; only the calendar date
is meaningful, so every accepted input is reduced to ``YYYY-MM-DDT00:00:00``.
Unix timestamps are read in the bank's reference timezone, so
``1409518800`` (2014-08-31 21:00 UTC) is the 1st of September.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from ..exceptions import DateParseError

DEFAULT_TIMEZONE = "Europe/Moscow"

DEFAULT_INPUT_FORMATS: tuple[str, ...] = (
    "%d.%m.%Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%Y-%m-%dT%H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)

DATE_TIME_FORMAT = "%Y-%m-%dT00:00:00"

_RELATIVE_DAYS = {"today": 0, "now": 0, "yesterday": -1, "tomorrow": 1}


def today(timezone: str = DEFAULT_TIMEZONE) -> date:
    """Current calendar date in the given timezone."""
    return datetime.now(ZoneInfo(timezone)).date()


def to_calendar_date(
    value: object,
    timezone: str = DEFAULT_TIMEZONE,
    formats: Sequence[str] = DEFAULT_INPUT_FORMATS,
) -> date:
    """Interpret a caller-supplied value as a calendar date.

    Args:
        value: Unix timestamp, date/datetime instance or human-entered string
        timezone: Timezone used for timestamps and aware datetimes
        formats: strptime formats tried in order for strings

    Returns:
        The calendar date

    Raises:
        DateParseError: If the value cannot be interpreted
    """
    tz = ZoneInfo(timezone)

    # bool is an int subclass but never a timestamp
    if isinstance(value, bool):
        raise DateParseError(value, "boolean is not a date")

    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value, tz=tz).date()
        except (OverflowError, OSError, ValueError) as e:
            raise DateParseError(value, str(e)) from e

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz).date()
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise DateParseError(value, "empty string")

        offset = _RELATIVE_DAYS.get(text.lower())
        if offset is not None:
            return today(timezone) + timedelta(days=offset)

        for fmt in formats:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise DateParseError(value, f"expected one of {', '.join(formats)}")

    raise DateParseError(value, f"unsupported type {type(value).__name__}")


def coerce_date(
    value: object,
    timezone: str = DEFAULT_TIMEZONE,
    formats: Sequence[str] = DEFAULT_INPUT_FORMATS,
) -> str:
    """Normalize a value to the ``YYYY-MM-DDT00:00:00`` wire format.

    Example:
        >>> coerce_date("01.09.2014")
        '2014-09-01T00:00:00'
    """
    return to_calendar_date(value, timezone, formats).strftime(DATE_TIME_FORMAT)


def resolve_date(
    value: object | None,
    timezone: str = DEFAULT_TIMEZONE,
    formats: Sequence[str] = DEFAULT_INPUT_FORMATS,
) -> date:
    """Like :func:`to_calendar_date`, but a missing value means today."""
    if value is None or value == "":
        return today(timezone)
    return to_calendar_date(value, timezone, formats)
