"""In-process reference runtime with Foundation object semantics.

:class:`ReferenceRuntime` keeps a table of live objects addressed by
synthetic handles.  It reproduces the parts of Foundation behaviour that
the bridges depend on:

* retain counts, with arrays retaining their elements on insert and
  releasing them on removal;
* ``isEqual:`` / ``hash`` per class (strings, dates and date components
  compare by value, actions and images by identity, arrays element-wise
  with ``hash == count``);
* ``NSDateComponentUndefined`` and ``NSNotFound`` sentinels;
* proleptic Gregorian resolution for any year (astronomical numbering, so
  year 0 is 1 BC) with lowest-value defaults and overflow normalisation.
  Only instants beyond the exact range of a double resolve to nil.

Unlike Foundation it *detects* misuse: messaging a released or unknown
handle raises :class:`~nsbridge.errors.StaleHandleError`, and messaging an
object of the wrong class raises ``TypeError``.  It is the default backend
on hosts without Foundation and the backend used by the test suite.
"""
from __future__ import annotations

import datetime as _dt
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from PIL import Image

from nsbridge.errors import StaleHandleError
from nsbridge.handles import Handle
from nsbridge.runtime.base import (
    NOT_FOUND,
    UNDEFINED_COMPONENT,
    CalendarUnit,
    NativeRuntime,
)
from nsbridge.runtime.registry import runtimes

if TYPE_CHECKING:
    from nsbridge.dates import Calendar

logger = logging.getLogger(__name__)

_HASH_MASK = 2**64 - 1
_FIRST_ADDRESS = 0x6000_0000_0010
_ADDRESS_STEP = 0x10
_GREGORIAN_IDENTIFIERS = frozenset({"gregorian", "iso8601"})
_SECONDS_PER_DAY = 86_400
_EPOCH = _dt.datetime(1970, 1, 1)
# Instants datetime can represent in every zone.
_MIN_TIMESTAMP = -62_135_596_800 + 2 * _SECONDS_PER_DAY
_MAX_TIMESTAMP = 253_402_300_799 - 2 * _SECONDS_PER_DAY
# Whole seconds a double-precision native date still holds exactly.
_MAX_EXACT_SECONDS = 2**53


# ---------------------------------------------------------------------------
# Object model
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class _NativeObject:
    retain_count: int = field(default=1, init=False)

    class_name = "NSObject"

    def children(self) -> list[Handle]:
        """Handles this object retains and must release on deallocation."""
        return []


@dataclass(eq=False)
class _String(_NativeObject):
    value: str = ""

    class_name = "NSString"


@dataclass(eq=False)
class _Image(_NativeObject):
    path: str = ""
    size: tuple[int, int] = (0, 0)

    class_name = "NSImage"


@dataclass(eq=False)
class _Date(_NativeObject):
    timestamp: float = 0.0

    class_name = "NSDate"


@dataclass(eq=False)
class _DateComponents(_NativeObject):
    values: dict[CalendarUnit, int] = field(default_factory=dict)

    class_name = "NSDateComponents"


@dataclass(eq=False)
class _Action(_NativeObject):
    identifier: Handle = Handle.NULL
    title: Handle = Handle.NULL

    class_name = "NSUserNotificationAction"

    def children(self) -> list[Handle]:
        return [self.identifier, self.title]


@dataclass(eq=False)
class _Array(_NativeObject):
    items: list[Handle] = field(default_factory=list)

    class_name = "NSMutableArray"

    def children(self) -> list[Handle]:
        return list(self.items)


_O = TypeVar("_O", bound=_NativeObject)


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


@runtimes.register("reference")
class ReferenceRuntime(NativeRuntime):
    """Pure-Python runtime that tracks every object it creates."""

    def __init__(self) -> None:
        self._objects: dict[int, _NativeObject] = {}
        self._next_address = _FIRST_ADDRESS

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _allocate(self, obj: _NativeObject) -> Handle:
        address = self._next_address
        self._next_address += _ADDRESS_STEP
        self._objects[address] = obj
        return Handle(address)

    def _lookup(self, handle: Handle, kind: type[_O]) -> _O:
        obj = self._objects.get(handle.address)
        if obj is None:
            detail = "null handle" if handle.is_null else "released or never created"
            raise StaleHandleError(handle.address, detail)
        if not isinstance(obj, kind):
            raise TypeError(
                f"{handle!r} refers to an {obj.class_name}, expected {kind.class_name}"
            )
        return obj

    @property
    def live_objects(self) -> int:
        """Number of objects that have not been deallocated."""
        return len(self._objects)

    def retain_count(self, handle: Handle) -> int:
        """Return the current retain count of ``handle``'s referent."""
        return self._lookup(handle, _NativeObject).retain_count

    def is_live(self, handle: Handle) -> bool:
        """Return True if ``handle`` refers to an object that is still alive."""
        return handle.address in self._objects

    def close(self) -> None:
        if self._objects:
            logger.debug("ReferenceRuntime closing with %d live object(s)", len(self._objects))
        self._objects.clear()

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def retain(self, handle: Handle) -> Handle:
        self._lookup(handle, _NativeObject).retain_count += 1
        return handle

    def release(self, handle: Handle) -> None:
        obj = self._lookup(handle, _NativeObject)
        obj.retain_count -= 1
        if obj.retain_count > 0:
            return
        del self._objects[handle.address]
        for child in obj.children():
            self.release(child)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def string_with_utf8(self, data: bytes) -> Handle:
        # C string semantics: the native side stops at the first NUL.
        data = data.split(b"\x00", 1)[0]
        try:
            value = data.decode("utf-8")
        except UnicodeDecodeError:
            return Handle.NULL
        return self._allocate(_String(value=value))

    def utf8_string(self, string: Handle) -> bytes | None:
        if string.is_null:
            return None
        return self._lookup(string, _String).value.encode("utf-8")

    def image_with_contents_of_file(self, path: str) -> Handle:
        try:
            with Image.open(path) as image:
                image.verify()
                size = image.size
        except (OSError, SyntaxError, ValueError) as exc:
            logger.debug("No image decoded from %r: %s", path, exc)
            return Handle.NULL
        return self._allocate(_Image(path=path, size=size))

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    def new_date_components(self) -> Handle:
        return self._allocate(_DateComponents())

    def set_date_component(self, components: Handle, unit: CalendarUnit, value: int) -> None:
        self._lookup(components, _DateComponents).values[CalendarUnit(unit)] = value

    def get_date_component(self, components: Handle, unit: CalendarUnit) -> int:
        values = self._lookup(components, _DateComponents).values
        return values.get(CalendarUnit(unit), UNDEFINED_COMPONENT)

    def components_from_date(self, date: Handle, calendar: "Calendar") -> Handle:
        _require_gregorian(calendar)
        timestamp = self._lookup(date, _Date).timestamp
        local = math.floor(timestamp) + _utc_offset(timestamp, calendar.tzinfo())
        days, seconds = divmod(local, _SECONDS_PER_DAY)
        year, month, day = _civil_from_days(days)
        hour, seconds = divmod(seconds, 3600)
        minute, second = divmod(seconds, 60)
        values = {
            CalendarUnit.YEAR: year,
            CalendarUnit.MONTH: month,
            CalendarUnit.DAY: day,
            CalendarUnit.HOUR: hour,
            CalendarUnit.MINUTE: minute,
            CalendarUnit.SECOND: second,
        }
        return self._allocate(_DateComponents(values=values))

    def date_from_components(self, components: Handle, calendar: "Calendar") -> Handle:
        _require_gregorian(calendar)
        values = self._lookup(components, _DateComponents).values
        year = values.get(CalendarUnit.YEAR, 1)
        month = values.get(CalendarUnit.MONTH, 1)
        # Out-of-range months roll over into neighbouring years.
        year, month_index = divmod(year * 12 + month - 1, 12)
        local = (
            (_days_from_civil(year, month_index + 1, 1) + values.get(CalendarUnit.DAY, 1) - 1)
            * _SECONDS_PER_DAY
            + values.get(CalendarUnit.HOUR, 0) * 3600
            + values.get(CalendarUnit.MINUTE, 0) * 60
            + values.get(CalendarUnit.SECOND, 0)
        )
        timestamp = _local_to_timestamp(local, calendar.tzinfo())
        if abs(timestamp) > _MAX_EXACT_SECONDS:
            logger.debug("Cannot resolve date components %r: beyond the date range", values)
            return Handle.NULL
        return self._allocate(_Date(timestamp=float(timestamp)))

    def date_with_timestamp(self, seconds: float) -> Handle:
        return self._allocate(_Date(timestamp=float(seconds)))

    def timestamp_of_date(self, date: Handle) -> float:
        return self._lookup(date, _Date).timestamp

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def new_notification_action(self, identifier: Handle, title: Handle) -> Handle:
        self._lookup(identifier, _String)
        self._lookup(title, _String)
        self.retain(identifier)
        self.retain(title)
        return self._allocate(_Action(identifier=identifier, title=title))

    def action_identifier(self, action: Handle) -> Handle:
        return self._lookup(action, _Action).identifier

    def action_title(self, action: Handle) -> Handle:
        return self._lookup(action, _Action).title

    # ------------------------------------------------------------------
    # Mutable arrays
    # ------------------------------------------------------------------

    def new_mutable_array(self) -> Handle:
        return self._allocate(_Array())

    def array_contains(self, array: Handle, obj: Handle) -> bool:
        return self.array_index_of(array, obj) != NOT_FOUND

    def array_count(self, array: Handle) -> int:
        return len(self._lookup(array, _Array).items)

    def array_object_at(self, array: Handle, index: int) -> Handle:
        return self._items_in_range(array, index, "objectAtIndex:")[index]

    def array_index_of(self, array: Handle, obj: Handle) -> int:
        for index, item in enumerate(self._lookup(array, _Array).items):
            if self.is_equal(item, obj):
                return index
        return NOT_FOUND

    def array_index_of_identical(self, array: Handle, obj: Handle) -> int:
        for index, item in enumerate(self._lookup(array, _Array).items):
            if item == obj:
                return index
        return NOT_FOUND

    def array_add(self, array: Handle, obj: Handle) -> None:
        items = self._lookup(array, _Array).items
        items.append(self.retain(obj))

    def array_insert(self, array: Handle, obj: Handle, index: int) -> None:
        items = self._lookup(array, _Array).items
        if not 0 <= index <= len(items):
            raise IndexError(f"insertObject:atIndex: index {index} beyond bounds [0 .. {len(items)}]")
        items.insert(index, self.retain(obj))

    def array_remove_all(self, array: Handle) -> None:
        items = self._lookup(array, _Array).items
        removed, items[:] = list(items), []
        for item in removed:
            self.release(item)

    def array_remove_at(self, array: Handle, index: int) -> None:
        items = self._items_in_range(array, index, "removeObjectAtIndex:")
        self.release(items.pop(index))

    def array_replace_at(self, array: Handle, index: int, obj: Handle) -> None:
        items = self._items_in_range(array, index, "replaceObjectAtIndex:withObject:")
        previous, items[index] = items[index], self.retain(obj)
        self.release(previous)

    def array_exchange(self, array: Handle, first: int, second: int) -> None:
        items = self._items_in_range(array, first, "exchangeObjectAtIndex:withObjectAtIndex:")
        self._items_in_range(array, second, "exchangeObjectAtIndex:withObjectAtIndex:")
        items[first], items[second] = items[second], items[first]

    def _items_in_range(self, array: Handle, index: int, selector: str) -> list[Handle]:
        items = self._lookup(array, _Array).items
        if not 0 <= index < len(items):
            raise IndexError(f"{selector} index {index} beyond bounds [0 .. {len(items) - 1}]")
        return items

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def is_equal(self, first: Handle, second: Handle) -> bool:
        if first == second:
            return not first.is_null
        if first.is_null or second.is_null:
            return False
        a = self._lookup(first, _NativeObject)
        b = self._lookup(second, _NativeObject)
        if type(a) is not type(b):
            return False
        if isinstance(a, _String):
            return a.value == b.value
        if isinstance(a, _Date):
            return a.timestamp == b.timestamp
        if isinstance(a, _DateComponents):
            return a.values == b.values
        if isinstance(a, _Array):
            return len(a.items) == len(b.items) and all(
                self.is_equal(x, y) for x, y in zip(a.items, b.items)
            )
        return False

    def hash(self, obj: Handle) -> int:
        target = self._lookup(obj, _NativeObject)
        if isinstance(target, _String):
            return hash(target.value) & _HASH_MASK
        if isinstance(target, _Date):
            return int(target.timestamp) & _HASH_MASK
        if isinstance(target, _DateComponents):
            return hash(frozenset(target.values.items())) & _HASH_MASK
        if isinstance(target, _Array):
            return len(target.items)
        return obj.address


def _require_gregorian(calendar: "Calendar") -> None:
    if calendar.identifier not in _GREGORIAN_IDENTIFIERS:
        raise ValueError(
            f"ReferenceRuntime only resolves Gregorian calendars, got {calendar.identifier!r}"
        )


# ---------------------------------------------------------------------------
# Proleptic Gregorian arithmetic
# ---------------------------------------------------------------------------


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 for a proleptic Gregorian date (astronomical years)."""
    year -= month <= 2
    era = year // 400
    year_of_era = year - era * 400
    day_of_year = (153 * ((month + 9) % 12) + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * 146097 + day_of_era - 719468


def _civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of :func:`_days_from_civil`."""
    days += 719468
    era = days // 146097
    day_of_era = days - era * 146097
    year_of_era = (
        day_of_era - day_of_era // 1460 + day_of_era // 36524 - day_of_era // 146096
    ) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    shifted_month = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * shifted_month + 2) // 5 + 1
    month = shifted_month + 3 if shifted_month < 10 else shifted_month - 9
    return year_of_era + era * 400 + (month <= 2), month, day


def _utc_offset(timestamp: float, tz: _dt.tzinfo | None) -> int:
    """Offset of ``tz`` (host zone when ``None``) at ``timestamp``, in seconds.

    Outside the range ``datetime`` covers, the offset at the nearest
    representable instant is used.
    """
    clamped = min(max(timestamp, _MIN_TIMESTAMP), _MAX_TIMESTAMP)
    moment = _dt.datetime.fromtimestamp(clamped, _dt.timezone.utc)
    moment = moment.astimezone() if tz is None else moment.astimezone(tz)
    offset = moment.utcoffset()
    return int(offset.total_seconds()) if offset is not None else 0


def _local_to_timestamp(local: int, tz: _dt.tzinfo | None) -> float:
    """Resolve wall-clock seconds since the local epoch to a POSIX timestamp."""
    if _MIN_TIMESTAMP <= local <= _MAX_TIMESTAMP:
        wall = _EPOCH + _dt.timedelta(seconds=local)
        if tz is not None:
            return wall.replace(tzinfo=tz).timestamp()
        try:
            return wall.timestamp()
        except (OSError, OverflowError) as exc:
            logger.debug("Host zone cannot resolve %s (%s); using its nearest offset", wall, exc)
    return local - _utc_offset(local, tz)
