"""The primitive call surface of a native object runtime.

:class:`NativeRuntime` lists every native operation the bridges consume.
Methods mirror the underlying Foundation messages one-to-one and keep their
native semantics: raw sentinels (``UNDEFINED_COMPONENT``, ``NOT_FOUND``),
no bounds checking, +1 results from constructors and +0 results from
accessors.  Translation into managed conventions (``None``, ``-1``,
``IndexError``) is the job of the bridges, never of a runtime.

Runtimes are synchronous and perform no locking.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntFlag
from typing import TYPE_CHECKING, ClassVar

from nsbridge.handles import Handle

if TYPE_CHECKING:
    from nsbridge.config import BridgeConfig
    from nsbridge.dates import Calendar

#: ``NSIntegerMax``, returned for date components that were never set.
UNDEFINED_COMPONENT: int = 2**63 - 1

#: ``NSNotFound``, returned by index searches that find nothing.
NOT_FOUND: int = 2**63 - 1


class CalendarUnit(IntFlag):
    """The ``NSCalendarUnit`` bits read and written by the date bridge."""

    YEAR = 1 << 2
    MONTH = 1 << 3
    DAY = 1 << 4
    HOUR = 1 << 5
    MINUTE = 1 << 6
    SECOND = 1 << 7


#: The six units converted between dates and calendar fields.
SUPPORTED_UNITS: CalendarUnit = (
    CalendarUnit.DAY
    | CalendarUnit.MONTH
    | CalendarUnit.YEAR
    | CalendarUnit.HOUR
    | CalendarUnit.MINUTE
    | CalendarUnit.SECOND
)


class NativeRuntime(ABC):
    """Abstract native object runtime.

    Subclasses are registered in :data:`nsbridge.runtime.registry.runtimes`
    under a short name and instantiated by :func:`nsbridge.bridge.init_bridge`.
    """

    #: Registry name, set by the registry on registration.
    name: ClassVar[str] = ""

    @classmethod
    def is_available(cls) -> bool:
        """Return True if this runtime can be loaded on the current host."""
        return True

    @classmethod
    def from_config(cls, config: "BridgeConfig") -> "NativeRuntime":
        """Instantiate the runtime for ``config``.  Override to read settings."""
        return cls()

    def close(self) -> None:
        """Release any process-level resources held by the runtime."""

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    @abstractmethod
    def retain(self, handle: Handle) -> Handle:
        """Increment the referent's retain count and return ``handle``."""

    @abstractmethod
    def release(self, handle: Handle) -> None:
        """Decrement the referent's retain count."""

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    @abstractmethod
    def string_with_utf8(self, data: bytes) -> Handle:
        """``[[NSString alloc] initWithUTF8String:data]``."""

    @abstractmethod
    def utf8_string(self, string: Handle) -> bytes | None:
        """``[string UTF8String]``, or ``None`` for a null handle."""

    @abstractmethod
    def image_with_contents_of_file(self, path: str) -> Handle:
        """``[[NSImage alloc] initWithContentsOfFile:path]``; null on failure."""

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    @abstractmethod
    def new_date_components(self) -> Handle:
        """``[[NSDateComponents alloc] init]`` with every unit undefined."""

    @abstractmethod
    def set_date_component(self, components: Handle, unit: CalendarUnit, value: int) -> None:
        """Set one unit of an ``NSDateComponents``."""

    @abstractmethod
    def get_date_component(self, components: Handle, unit: CalendarUnit) -> int:
        """Read one unit; :data:`UNDEFINED_COMPONENT` when never set."""

    @abstractmethod
    def components_from_date(self, date: Handle, calendar: "Calendar") -> Handle:
        """``[calendar components:SUPPORTED_UNITS fromDate:date]``."""

    @abstractmethod
    def date_from_components(self, components: Handle, calendar: "Calendar") -> Handle:
        """``[calendar dateFromComponents:components]``; null if unresolvable."""

    @abstractmethod
    def date_with_timestamp(self, seconds: float) -> Handle:
        """``[[NSDate alloc] initWithTimeIntervalSince1970:seconds]``."""

    @abstractmethod
    def timestamp_of_date(self, date: Handle) -> float:
        """``[date timeIntervalSince1970]``."""

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @abstractmethod
    def new_notification_action(self, identifier: Handle, title: Handle) -> Handle:
        """``[NSUserNotificationAction actionWithIdentifier:title:]`` (+1)."""

    @abstractmethod
    def action_identifier(self, action: Handle) -> Handle:
        """``action.identifier`` (borrowed)."""

    @abstractmethod
    def action_title(self, action: Handle) -> Handle:
        """``action.title`` (borrowed)."""

    # ------------------------------------------------------------------
    # Mutable arrays
    # ------------------------------------------------------------------

    @abstractmethod
    def new_mutable_array(self) -> Handle:
        """``[[NSMutableArray alloc] init]``."""

    @abstractmethod
    def array_contains(self, array: Handle, obj: Handle) -> bool:
        """``[array containsObject:obj]``."""

    @abstractmethod
    def array_count(self, array: Handle) -> int:
        """``[array count]``."""

    @abstractmethod
    def array_object_at(self, array: Handle, index: int) -> Handle:
        """``[array objectAtIndex:index]`` (borrowed)."""

    @abstractmethod
    def array_index_of(self, array: Handle, obj: Handle) -> int:
        """``[array indexOfObject:obj]``; :data:`NOT_FOUND` when absent."""

    @abstractmethod
    def array_index_of_identical(self, array: Handle, obj: Handle) -> int:
        """``[array indexOfObjectIdenticalTo:obj]``; :data:`NOT_FOUND` when absent."""

    @abstractmethod
    def array_add(self, array: Handle, obj: Handle) -> None:
        """``[array addObject:obj]``."""

    @abstractmethod
    def array_insert(self, array: Handle, obj: Handle, index: int) -> None:
        """``[array insertObject:obj atIndex:index]``."""

    @abstractmethod
    def array_remove_all(self, array: Handle) -> None:
        """``[array removeAllObjects]``."""

    @abstractmethod
    def array_remove_at(self, array: Handle, index: int) -> None:
        """``[array removeObjectAtIndex:index]``."""

    @abstractmethod
    def array_replace_at(self, array: Handle, index: int, obj: Handle) -> None:
        """``[array replaceObjectAtIndex:index withObject:obj]``."""

    @abstractmethod
    def array_exchange(self, array: Handle, first: int, second: int) -> None:
        """``[array exchangeObjectAtIndex:first withObjectAtIndex:second]``."""

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @abstractmethod
    def is_equal(self, first: Handle, second: Handle) -> bool:
        """``[first isEqual:second]``."""

    @abstractmethod
    def hash(self, obj: Handle) -> int:
        """``[obj hash]``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
