"""Objective-C runtime backend built on ``ctypes``.

Messages are sent through ``objc_msgSend`` cast to an exact prototype per
call, which is required on arm64 where variadic and fixed calling
conventions differ.  Every constructor returns a +1 object: results of
``alloc``/``init`` are used as-is and autoreleased convenience results are
retained explicitly, so that :meth:`ObjCRuntime.release` always balances.

Foundation raises Objective-C exceptions for out-of-range indices and nil
arguments; such exceptions cannot cross ``ctypes`` and abort the process.
The bridges therefore validate every index and argument before calling in.
"""
from __future__ import annotations

import ctypes
import ctypes.util
import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from nsbridge.errors import RuntimeUnavailableError
from nsbridge.handles import Handle
from nsbridge.runtime.base import SUPPORTED_UNITS, CalendarUnit, NativeRuntime
from nsbridge.runtime.registry import runtimes

if TYPE_CHECKING:
    from nsbridge.config import BridgeConfig
    from nsbridge.dates import Calendar

logger = logging.getLogger(__name__)

_id = ctypes.c_void_p
_SEL = ctypes.c_void_p
_NSInteger = ctypes.c_long
_NSUInteger = ctypes.c_ulong
_BOOL = ctypes.c_bool

_UNIT_ACCESSORS: dict[CalendarUnit, tuple[bytes, bytes]] = {
    CalendarUnit.DAY: (b"day", b"setDay:"),
    CalendarUnit.MONTH: (b"month", b"setMonth:"),
    CalendarUnit.YEAR: (b"year", b"setYear:"),
    CalendarUnit.HOUR: (b"hour", b"setHour:"),
    CalendarUnit.MINUTE: (b"minute", b"setMinute:"),
    CalendarUnit.SECOND: (b"second", b"setSecond:"),
}


def _find(name: str, override: str | None) -> str | None:
    if override:
        return override
    return ctypes.util.find_library(name)


@runtimes.register("objc")
class ObjCRuntime(NativeRuntime):
    """Foundation-backed runtime for macOS.

    Parameters
    ----------
    config:
        Optional configuration carrying explicit library paths.

    Raises
    ------
    RuntimeUnavailableError
        If ``libobjc`` or Foundation cannot be loaded.
    """

    def __init__(self, config: "BridgeConfig | None" = None) -> None:
        objc_path = _find("objc", config.objc_path if config else None)
        foundation_path = _find("Foundation", config.foundation_path if config else None)
        appkit_path = _find("AppKit", config.appkit_path if config else None)
        if objc_path is None or foundation_path is None:
            raise RuntimeUnavailableError("objc", "libobjc or Foundation not found")
        try:
            self._objc = ctypes.cdll.LoadLibrary(objc_path)
            self._foundation = ctypes.cdll.LoadLibrary(foundation_path)
            # NSImage lives in AppKit; without it images are never decoded.
            self._appkit = ctypes.cdll.LoadLibrary(appkit_path) if appkit_path else None
        except OSError as exc:
            raise RuntimeUnavailableError("objc", str(exc)) from exc
        logger.debug("Loaded libobjc from %s and Foundation from %s", objc_path, foundation_path)

        self._objc.objc_getClass.restype = _id
        self._objc.objc_getClass.argtypes = [ctypes.c_char_p]
        self._objc.sel_registerName.restype = _SEL
        self._objc.sel_registerName.argtypes = [ctypes.c_char_p]
        self._objc.objc_autoreleasePoolPush.restype = ctypes.c_void_p
        self._objc.objc_autoreleasePoolPop.argtypes = [ctypes.c_void_p]
        self._msg_send_address = ctypes.cast(self._objc.objc_msgSend, ctypes.c_void_p).value
        self._prototypes: dict[tuple[Any, ...], Callable[..., Any]] = {}
        self._selectors: dict[bytes, int] = {}
        self._classes: dict[bytes, int] = {}

    @classmethod
    def is_available(cls) -> bool:
        return sys.platform == "darwin" and ctypes.util.find_library("Foundation") is not None

    @classmethod
    def from_config(cls, config: "BridgeConfig") -> "ObjCRuntime":
        return cls(config)

    @contextmanager
    def _autorelease_pool(self) -> Iterator[None]:
        pool = self._objc.objc_autoreleasePoolPush()
        try:
            yield
        finally:
            self._objc.objc_autoreleasePoolPop(pool)

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def _class(self, name: bytes) -> int:
        if name not in self._classes:
            cls = self._objc.objc_getClass(name)
            if not cls:
                raise RuntimeUnavailableError("objc", f"class {name.decode()} not found")
            self._classes[name] = cls
        return self._classes[name]

    def _selector(self, name: bytes) -> int:
        if name not in self._selectors:
            self._selectors[name] = self._objc.sel_registerName(name)
        return self._selectors[name]

    def _send(
        self,
        receiver: Handle | int | None,
        selector: bytes,
        *args: Any,
        restype: Any = _id,
        argtypes: tuple[Any, ...] = (),
    ) -> Any:
        key = (restype, *argtypes)
        function = self._prototypes.get(key)
        if function is None:
            prototype = ctypes.CFUNCTYPE(restype, _id, _SEL, *argtypes)
            function = prototype(self._msg_send_address)
            self._prototypes[key] = function
        if isinstance(receiver, Handle):
            receiver = receiver.address or None
        return function(receiver, self._selector(selector), *args)

    def _new(self, class_name: bytes, init: bytes = b"init", *args: Any, argtypes: tuple[Any, ...] = ()) -> Handle:
        instance = self._send(self._class(class_name), b"alloc")
        return Handle.from_pointer(self._send(instance, init, *args, argtypes=argtypes))

    def _owned(self, result: int | None) -> Handle:
        handle = Handle.from_pointer(result)
        return self.retain(handle) if handle else handle

    def _calendar(self, calendar: "Calendar") -> int:
        identifier = self.string_with_utf8(calendar.identifier.encode("utf-8"))
        try:
            native = self._send(
                self._class(b"NSCalendar"), b"calendarWithIdentifier:", identifier, argtypes=(_id,)
            )
        finally:
            self.release(identifier)
        if not native:
            raise ValueError(f"Unknown calendar identifier {calendar.identifier!r}")
        if calendar.timezone is not None:
            name = self.string_with_utf8(calendar.timezone.encode("utf-8"))
            try:
                zone = self._send(self._class(b"NSTimeZone"), b"timeZoneWithName:", name, argtypes=(_id,))
            finally:
                self.release(name)
            if not zone:
                raise ValueError(f"Unknown time zone {calendar.timezone!r}")
            self._send(native, b"setTimeZone:", zone, restype=None, argtypes=(_id,))
        return native

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def retain(self, handle: Handle) -> Handle:
        self._send(handle, b"retain")
        return handle

    def release(self, handle: Handle) -> None:
        self._send(handle, b"release", restype=None)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def string_with_utf8(self, data: bytes) -> Handle:
        return self._new(b"NSString", b"initWithUTF8String:", data, argtypes=(ctypes.c_char_p,))

    def utf8_string(self, string: Handle) -> bytes | None:
        if string.is_null:
            return None
        return self._send(string, b"UTF8String", restype=ctypes.c_char_p)

    def image_with_contents_of_file(self, path: str) -> Handle:
        if self._appkit is None:
            return Handle.NULL
        native_path = self.string_with_utf8(path.encode("utf-8"))
        try:
            return self._new(b"NSImage", b"initWithContentsOfFile:", native_path, argtypes=(_id,))
        finally:
            self.release(native_path)

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    def new_date_components(self) -> Handle:
        return self._new(b"NSDateComponents")

    def set_date_component(self, components: Handle, unit: CalendarUnit, value: int) -> None:
        setter = _UNIT_ACCESSORS[CalendarUnit(unit)][1]
        self._send(components, setter, value, restype=None, argtypes=(_NSInteger,))

    def get_date_component(self, components: Handle, unit: CalendarUnit) -> int:
        getter = _UNIT_ACCESSORS[CalendarUnit(unit)][0]
        return self._send(components, getter, restype=_NSInteger)

    def components_from_date(self, date: Handle, calendar: "Calendar") -> Handle:
        with self._autorelease_pool():
            native = self._calendar(calendar)
            return self._owned(
                self._send(
                    native,
                    b"components:fromDate:",
                    int(SUPPORTED_UNITS),
                    date,
                    argtypes=(_NSUInteger, _id),
                )
            )

    def date_from_components(self, components: Handle, calendar: "Calendar") -> Handle:
        with self._autorelease_pool():
            native = self._calendar(calendar)
            return self._owned(
                self._send(native, b"dateFromComponents:", components, argtypes=(_id,))
            )

    def date_with_timestamp(self, seconds: float) -> Handle:
        return self._new(
            b"NSDate", b"initWithTimeIntervalSince1970:", float(seconds), argtypes=(ctypes.c_double,)
        )

    def timestamp_of_date(self, date: Handle) -> float:
        return self._send(date, b"timeIntervalSince1970", restype=ctypes.c_double)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def new_notification_action(self, identifier: Handle, title: Handle) -> Handle:
        return self._owned(
            self._send(
                self._class(b"NSUserNotificationAction"),
                b"actionWithIdentifier:title:",
                identifier,
                title,
                argtypes=(_id, _id),
            )
        )

    def action_identifier(self, action: Handle) -> Handle:
        return Handle.from_pointer(self._send(action, b"identifier"))

    def action_title(self, action: Handle) -> Handle:
        return Handle.from_pointer(self._send(action, b"title"))

    # ------------------------------------------------------------------
    # Mutable arrays
    # ------------------------------------------------------------------

    def new_mutable_array(self) -> Handle:
        return self._new(b"NSMutableArray")

    def array_contains(self, array: Handle, obj: Handle) -> bool:
        return self._send(array, b"containsObject:", obj, restype=_BOOL, argtypes=(_id,))

    def array_count(self, array: Handle) -> int:
        return self._send(array, b"count", restype=_NSUInteger)

    def array_object_at(self, array: Handle, index: int) -> Handle:
        return Handle.from_pointer(
            self._send(array, b"objectAtIndex:", index, argtypes=(_NSUInteger,))
        )

    def array_index_of(self, array: Handle, obj: Handle) -> int:
        return self._send(array, b"indexOfObject:", obj, restype=_NSUInteger, argtypes=(_id,))

    def array_index_of_identical(self, array: Handle, obj: Handle) -> int:
        return self._send(
            array, b"indexOfObjectIdenticalTo:", obj, restype=_NSUInteger, argtypes=(_id,)
        )

    def array_add(self, array: Handle, obj: Handle) -> None:
        self._send(array, b"addObject:", obj, restype=None, argtypes=(_id,))

    def array_insert(self, array: Handle, obj: Handle, index: int) -> None:
        self._send(
            array, b"insertObject:atIndex:", obj, index, restype=None, argtypes=(_id, _NSUInteger)
        )

    def array_remove_all(self, array: Handle) -> None:
        self._send(array, b"removeAllObjects", restype=None)

    def array_remove_at(self, array: Handle, index: int) -> None:
        self._send(array, b"removeObjectAtIndex:", index, restype=None, argtypes=(_NSUInteger,))

    def array_replace_at(self, array: Handle, index: int, obj: Handle) -> None:
        self._send(
            array,
            b"replaceObjectAtIndex:withObject:",
            index,
            obj,
            restype=None,
            argtypes=(_NSUInteger, _id),
        )

    def array_exchange(self, array: Handle, first: int, second: int) -> None:
        self._send(
            array,
            b"exchangeObjectAtIndex:withObjectAtIndex:",
            first,
            second,
            restype=None,
            argtypes=(_NSUInteger, _NSUInteger),
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def is_equal(self, first: Handle, second: Handle) -> bool:
        return self._send(first, b"isEqual:", second, restype=_BOOL, argtypes=(_id,))

    def hash(self, obj: Handle) -> int:
        return self._send(obj, b"hash", restype=_NSUInteger)
