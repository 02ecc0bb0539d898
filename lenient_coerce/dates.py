"""
Date/time coercion for lenient-coerce.

Spreadsheet exports mix human-typed dates (``"15/03/2024 13:45:00"``) with
numeric serial dates (``"45366"``).  ``coerce_datetime()`` resolves both to
``datetime`` without the caller having to know which one a cell holds.

Algorithm:
1. ``datetime`` instances pass through unchanged.
2. The value is rendered to text; empty text is absent (``None``).
3. The text must match one of the accepted layouts *exactly* (no leading or
   trailing whitespace, no partial match, no format inference).
4. Otherwise the text is read as a float day count from the serial epoch
   (1899-12-30, the day before spreadsheet "day 1").  Values outside
   ``[-693593, 2958465]`` (years 1 to 9999) are rejected.

Layouts:
  Layouts use strftime-style directives but are compiled here into anchored
  regular expressions instead of going through ``time.strptime``, whose
  ``%p`` and ``%b`` follow the process locale.  Month names and AM/PM are
  always English.  Supported directives:

  ======  ==================================================
  ``%Y``  4-digit year
  ``%m``  2-digit month
  ``%d``  2-digit day
  ``%H``  2-digit hour (00-23)
  ``%I``  2-digit hour (01-12), paired with ``%p``
  ``%M``  2-digit minute
  ``%S``  2-digit second
  ``%f``  1-7 fraction digits (truncated to microseconds)
  ``%p``  ``AM`` / ``PM`` (any letter case)
  ``%b``  abbreviated English month name (``Mar``)
  ``%B``  full English month name (``March``)
  ``%z``  ``Z``, ``+HH:MM`` or ``+HHMM``
  ``%%``  literal ``%``
  ======  ==================================================

  The special layout ``"o"`` is the round-trip timestamp
  ``2024-03-15T13:45:00.0000000`` with an optional ``Z`` / ``+HH:MM`` suffix.
  Layouts with an offset produce timezone-aware datetimes.
"""

from __future__ import annotations

import datetime as dt
import functools
import re
from typing import Any, Sequence

from lenient_coerce.kinds import to_text

ROUND_TRIP_LAYOUT = "o"

DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%d %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %I:%M:%S %p",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %I:%M:%S %p",
    "%d-%m-%Y %H:%M:%S",
    "%d-%m-%Y %I:%M:%S %p",
    ROUND_TRIP_LAYOUT,
)

# Spreadsheet serial dates: day 0 is 1899-12-30
SERIAL_EPOCH = dt.datetime(1899, 12, 30)
SERIAL_MIN_DAYS = -693593.0
SERIAL_MAX_DAYS = 2958465.0

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_MONTH_LOOKUP = {name.lower(): i for i, name in enumerate(_MONTH_NAMES, start=1)}
_MONTH_LOOKUP.update({name[:3].lower(): i for i, name in enumerate(_MONTH_NAMES, start=1)})

_DIRECTIVES: dict[str, str] = {
    "Y": r"(?P<year>[0-9]{4})",
    "m": r"(?P<month>[0-9]{2})",
    "d": r"(?P<day>[0-9]{2})",
    "H": r"(?P<hour>[0-9]{2})",
    "I": r"(?P<hour12>[0-9]{2})",
    "M": r"(?P<minute>[0-9]{2})",
    "S": r"(?P<second>[0-9]{2})",
    "f": r"(?P<fraction>[0-9]{1,7})",
    "p": r"(?P<meridiem>(?i:AM|PM))",
    "b": r"(?P<month_name>(?i:" + "|".join(n[:3] for n in _MONTH_NAMES) + "))",
    "B": r"(?P<month_name>(?i:" + "|".join(_MONTH_NAMES) + "))",
    "z": r"(?P<offset>Z|[+-][0-9]{2}:?[0-9]{2})",
}

_ROUND_TRIP_RE = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"T(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"\.(?P<fraction>[0-9]{7})"
    r"(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})?"
)


@functools.lru_cache(maxsize=256)
def compile_layout(layout: str) -> re.Pattern[str]:
    """Compile a date layout into a regex to be used with ``fullmatch``.

    Raises:
        ValueError: On an unsupported directive, a dangling ``%`` or a
            directive that appears twice.
    """
    if layout == ROUND_TRIP_LAYOUT:
        return _ROUND_TRIP_RE

    parts: list[str] = []
    i = 0
    while i < len(layout):
        ch = layout[i]
        if ch != "%":
            parts.append(re.escape(ch))
            i += 1
            continue
        if i + 1 >= len(layout):
            raise ValueError(f"Dangling '%' at end of date layout {layout!r}")
        directive = layout[i + 1]
        if directive == "%":
            parts.append("%")
        elif directive in _DIRECTIVES:
            parts.append(_DIRECTIVES[directive])
        else:
            raise ValueError(f"Unsupported directive '%{directive}' in date layout {layout!r}")
        i += 2

    try:
        return re.compile("".join(parts))
    except re.error as e:
        raise ValueError(f"Invalid date layout {layout!r}: {e}") from e


def _parse_offset(text: str) -> dt.tzinfo:
    if text == "Z":
        return dt.timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    delta = dt.timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return dt.timezone(sign * delta)


def _hour(groups: dict[str, str | None]) -> int:
    if groups.get("hour12") is None:
        return int(groups.get("hour") or 0)
    hour = int(groups["hour12"])
    if not 1 <= hour <= 12:
        raise ValueError(f"12-hour clock value out of range: {hour}")
    hour %= 12
    if (groups.get("meridiem") or "AM").upper() == "PM":
        hour += 12
    return hour


def _build_datetime(groups: dict[str, str | None]) -> dt.datetime | None:
    """Assemble a datetime from matched groups; ``None`` if the fields are impossible."""
    try:
        if groups.get("month_name") is not None:
            month = _MONTH_LOOKUP[groups["month_name"].lower()]
        else:
            month = int(groups.get("month") or 1)
        fraction = groups.get("fraction") or ""
        offset = groups.get("offset")
        return dt.datetime(
            int(groups.get("year") or 1900),
            month,
            int(groups.get("day") or 1),
            _hour(groups),
            int(groups.get("minute") or 0),
            int(groups.get("second") or 0),
            int(fraction[:6].ljust(6, "0")),
            tzinfo=_parse_offset(offset) if offset else None,
        )
    except ValueError:
        return None


def parse_layouts(text: str, formats: Sequence[str]) -> dt.datetime | None:
    """Return the first exact layout match for *text*, or ``None``."""
    for layout in formats:
        match = compile_layout(layout).fullmatch(text)
        if match is None:
            continue
        result = _build_datetime(match.groupdict())
        if result is not None:
            return result
    return None


def from_serial(
    text: str,
    epoch: dt.datetime = SERIAL_EPOCH,
    min_days: float = SERIAL_MIN_DAYS,
    max_days: float = SERIAL_MAX_DAYS,
) -> dt.datetime | None:
    """Interpret *text* as a serial day count from *epoch*.

    The fractional part is the time of day (``0.5`` is noon).  Text that is
    not a number, NaN, or a count outside ``[min_days, max_days]`` gives
    ``None``.
    """
    try:
        days = float(text)
    except ValueError:
        return None
    if not min_days <= days <= max_days:
        return None
    try:
        return epoch + dt.timedelta(days=days)
    except OverflowError:
        return None


def coerce_datetime(
    value: Any,
    formats: Sequence[str] | None = None,
    *,
    serial_fallback: bool = True,
    serial_epoch: dt.datetime = SERIAL_EPOCH,
    serial_min_days: float = SERIAL_MIN_DAYS,
    serial_max_days: float = SERIAL_MAX_DAYS,
) -> dt.datetime | None:
    """Coerce *value* to a datetime, or ``None`` when it cannot be read as one.

    Args:
        value: Anything; ``datetime`` instances are returned unchanged.
        formats: Accepted layouts, tried in order.  Defaults to
            ``DEFAULT_DATE_FORMATS``.
        serial_fallback: If ``False``, skip the serial-date step.
        serial_epoch: Day zero for serial dates.
        serial_min_days: Smallest accepted serial day count.
        serial_max_days: Largest accepted serial day count.
    """
    if isinstance(value, dt.datetime):
        return value
    text = to_text(value)
    if not text:
        return None

    result = parse_layouts(text, DEFAULT_DATE_FORMATS if formats is None else formats)
    if result is not None or not serial_fallback:
        return result
    return from_serial(text, serial_epoch, serial_min_days, serial_max_days)
