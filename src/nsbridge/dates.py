"""DateComponentBridge — calendar fields and dates.

Native dates are only ever produced from, or read through, a native
calendar-fields object (``NSDateComponents``).  There is no direct
date-to-date conversion.

Calendar resolution depends on the calendar and time zone in force, so
every conversion takes an explicit :class:`Calendar`.  When it is omitted,
:meth:`Calendar.current` supplies the configured one.

An unspecified field is ``None`` on the managed side.  The native
"undefined" sentinel never leaves this module.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import asdict, dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nsbridge.component import BridgeComponent
from nsbridge.handles import Handle
from nsbridge.runtime.base import UNDEFINED_COMPONENT, CalendarUnit

logger = logging.getLogger(__name__)

_NSINTEGER_MIN = -(2**63)

FIELD_UNITS: dict[str, CalendarUnit] = {
    "day": CalendarUnit.DAY,
    "month": CalendarUnit.MONTH,
    "year": CalendarUnit.YEAR,
    "hour": CalendarUnit.HOUR,
    "minute": CalendarUnit.MINUTE,
    "second": CalendarUnit.SECOND,
}


# ---------------------------------------------------------------------------
# Managed records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Calendar:
    """Calendar and time zone used to resolve calendar fields.

    Parameters
    ----------
    identifier:
        Calendar identifier, e.g. ``"gregorian"``.
    timezone:
        IANA zone name.  ``None`` uses the host's current zone, which makes
        results depend on ambient process state.
    """

    identifier: str = "gregorian"
    timezone: str | None = None

    def __post_init__(self) -> None:
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Unknown time zone {self.timezone!r}") from exc

    def tzinfo(self) -> _dt.tzinfo | None:
        """Return the zone as a ``tzinfo``, or ``None`` for the host zone."""
        if self.timezone is None:
            return None
        return ZoneInfo(self.timezone)

    @classmethod
    def current(cls) -> "Calendar":
        """The calendar from the active bridge configuration.

        Falls back to the environment-resolved configuration when the bridge
        has not been initialised.
        """
        from nsbridge.bridge import bridge_ready, get_bridge
        from nsbridge.config import load_config

        config = get_bridge().config if bridge_ready() else load_config()
        return cls(identifier=config.calendar, timezone=config.timezone)


@dataclass(frozen=True)
class CalendarFields:
    """Six optional calendar units.  ``None`` means "unspecified", not zero."""

    day: int | None = None
    month: int | None = None
    year: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if value is not None:
                _check_value(name, value)

    @property
    def is_complete(self) -> bool:
        """Return True if all six fields are specified."""
        return all(value is not None for value in asdict(self).values())

    def specified(self) -> dict[str, int]:
        """Return only the specified fields, keyed by field name."""
        return {name: value for name, value in asdict(self).items() if value is not None}

    @classmethod
    def from_datetime(cls, moment: _dt.datetime) -> "CalendarFields":
        """Build fully specified fields from a ``datetime``'s wall-clock value."""
        return cls(
            day=moment.day,
            month=moment.month,
            year=moment.year,
            hour=moment.hour,
            minute=moment.minute,
            second=moment.second,
        )


def _check_value(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if not _NSINTEGER_MIN <= value < UNDEFINED_COMPONENT:
        raise ValueError(f"{name}={value} is outside the native integer range")


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------


class DateComponentBridge(BridgeComponent):
    """Converts between calendar fields, native calendar-fields objects and dates."""

    def new_calendar_fields(self) -> Handle:
        """Create an owned native calendar-fields object with every field unspecified."""
        return self.runtime.new_date_components()

    # -- field accessors ------------------------------------------------

    def set_day(self, fields: Handle, value: int) -> None:
        self._set(fields, "day", value)

    def get_day(self, fields: Handle) -> int | None:
        return self._get(fields, "day")

    def set_month(self, fields: Handle, value: int) -> None:
        self._set(fields, "month", value)

    def get_month(self, fields: Handle) -> int | None:
        return self._get(fields, "month")

    def set_year(self, fields: Handle, value: int) -> None:
        self._set(fields, "year", value)

    def get_year(self, fields: Handle) -> int | None:
        return self._get(fields, "year")

    def set_hour(self, fields: Handle, value: int) -> None:
        self._set(fields, "hour", value)

    def get_hour(self, fields: Handle) -> int | None:
        return self._get(fields, "hour")

    def set_minute(self, fields: Handle, value: int) -> None:
        self._set(fields, "minute", value)

    def get_minute(self, fields: Handle) -> int | None:
        return self._get(fields, "minute")

    def set_second(self, fields: Handle, value: int) -> None:
        self._set(fields, "second", value)

    def get_second(self, fields: Handle) -> int | None:
        return self._get(fields, "second")

    def _set(self, fields: Handle, name: str, value: int) -> None:
        _check_value(name, value)
        self.runtime.set_date_component(fields, FIELD_UNITS[name], value)

    def _get(self, fields: Handle, name: str) -> int | None:
        raw = self.runtime.get_date_component(fields, FIELD_UNITS[name])
        return None if raw == UNDEFINED_COMPONENT else raw

    # -- conversions ----------------------------------------------------

    def to_calendar_fields(self, date: Handle, calendar: Calendar | None = None) -> Handle:
        """Derive an owned, fully populated calendar-fields object from ``date``.

        Only day, month, year, hour, minute and second are read.
        """
        calendar = calendar or Calendar.current()
        return self.runtime.components_from_date(date, calendar)

    def to_date(self, fields: Handle, calendar: Calendar | None = None) -> Handle:
        """Resolve a calendar-fields object into an owned native date.

        Unspecified fields take the calendar's lowest value and out-of-range
        values are normalised by the calendar.  Returns ``Handle.NULL`` when
        the fields cannot be resolved at all.
        """
        calendar = calendar or Calendar.current()
        date = self.runtime.date_from_components(fields, calendar)
        if date.is_null:
            logger.debug("Calendar %r could not resolve %r", calendar, fields)
        return date

    def fields_to_native(self, fields: CalendarFields) -> Handle:
        """Create an owned native calendar-fields object from ``fields``."""
        handle = self.new_calendar_fields()
        for name, value in fields.specified().items():
            self._set(handle, name, value)
        return handle

    def native_to_fields(self, handle: Handle) -> CalendarFields:
        """Read a native calendar-fields object into a managed record."""
        return CalendarFields(**{name: self._get(handle, name) for name in FIELD_UNITS})

    def date_from_datetime(self, moment: _dt.datetime) -> Handle:
        """Create an owned native date for an aware ``datetime``.

        Raises
        ------
        ValueError
            If ``moment`` is naive; a naive value has no defined instant.
        """
        if moment.tzinfo is None or moment.utcoffset() is None:
            raise ValueError("date_from_datetime requires a timezone-aware datetime")
        return self.runtime.date_with_timestamp(moment.timestamp())

    def datetime_from_date(self, date: Handle, calendar: Calendar | None = None) -> _dt.datetime:
        """Return the instant of ``date`` as an aware ``datetime`` in the calendar's zone."""
        calendar = calendar or Calendar.current()
        timestamp = self.runtime.timestamp_of_date(date)
        tz = calendar.tzinfo()
        if tz is None:
            return _dt.datetime.fromtimestamp(timestamp).astimezone()
        return _dt.datetime.fromtimestamp(timestamp, tz)
