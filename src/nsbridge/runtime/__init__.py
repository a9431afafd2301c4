"""Native runtime backends.

Importing this package registers the built-in backends in
:data:`runtimes`.  ``objc`` is registered before ``reference`` so that
``auto`` selection prefers Foundation wherever it is available.
"""
from __future__ import annotations

from nsbridge.runtime.base import (
    NOT_FOUND,
    SUPPORTED_UNITS,
    UNDEFINED_COMPONENT,
    CalendarUnit,
    NativeRuntime,
)
from nsbridge.runtime.registry import RuntimeRegistry, runtimes
from nsbridge.runtime.objc import ObjCRuntime
from nsbridge.runtime.reference import ReferenceRuntime

__all__ = [
    "NOT_FOUND",
    "SUPPORTED_UNITS",
    "UNDEFINED_COMPONENT",
    "CalendarUnit",
    "NativeRuntime",
    "ObjCRuntime",
    "ReferenceRuntime",
    "RuntimeRegistry",
    "runtimes",
]
