"""Opaque handle convention shared by every bridge.

A :class:`Handle` is an unowned, non-dereferenceable reference to an object
living in the native runtime.  The managed side only ever holds the handle
value; it never reads or frees the referent's memory directly.

Ownership rules
---------------
* Constructors (``text_to_native``, ``new_action``, ``to_date`` ...) return
  *owned* handles.  The caller must eventually call ``runtime.release``.
* Accessors (``element_at``, ``action_identifier_handle`` ...) return
  *borrowed* handles that stay valid only while their container keeps the
  object alive.

:func:`scoped` and :class:`HandleScope` make the release explicit::

    with HandleScope(runtime) as scope:
        text = scope.own(bridge.scalars.text_to_native("hello"))
        array = scope.own(bridge.arrays.new_mutable_collection())
        bridge.arrays.append(array, text)
    # both handles released here, in reverse order
"""
from __future__ import annotations

import ctypes
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from nsbridge.runtime.base import NativeRuntime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Handle:
    """Opaque reference to a native object.

    Two handles compare equal only when they refer to the *same* native
    object (identity).  Use :class:`nsbridge.identity.IdentityBridge` for
    native value equality.

    Parameters
    ----------
    address:
        Raw native address.  ``0`` is the null handle.
    """

    address: int

    NULL: ClassVar["Handle"]

    def __post_init__(self) -> None:
        if not isinstance(self.address, int) or isinstance(self.address, bool):
            raise TypeError(f"Handle address must be an int, got {self.address!r}")
        if self.address < 0:
            raise ValueError(f"Handle address must be non-negative, got {self.address}")

    def __bool__(self) -> bool:
        return self.address != 0

    def __repr__(self) -> str:
        if not self.address:
            return "Handle(NULL)"
        return f"Handle(0x{self.address:x})"

    @property
    def is_null(self) -> bool:
        """Return True if this handle refers to no object."""
        return self.address == 0

    @property
    def _as_parameter_(self) -> ctypes.c_void_p:
        # Lets a Handle be passed directly as a ctypes argument.
        return ctypes.c_void_p(self.address or None)

    @classmethod
    def from_pointer(cls, value: int | None) -> "Handle":
        """Build a handle from a ``ctypes.c_void_p`` result (``None`` is null)."""
        return cls(value or 0)


Handle.NULL = Handle(0)


@contextmanager
def scoped(runtime: "NativeRuntime", handle: Handle) -> Iterator[Handle]:
    """Yield ``handle`` and release it when the block exits.

    A null handle is yielded unchanged and never released.
    """
    try:
        yield handle
    finally:
        if handle:
            runtime.release(handle)


class HandleScope:
    """Collects owned handles and releases them together.

    Handles are released in reverse acquisition order, so a container
    registered after its elements is released first.

    Parameters
    ----------
    runtime:
        The runtime that created the handles.
    """

    def __init__(self, runtime: "NativeRuntime") -> None:
        self._runtime = runtime
        self._owned: list[Handle] = []

    def own(self, handle: Handle) -> Handle:
        """Take ownership of ``handle`` and return it unchanged."""
        if handle:
            self._owned.append(handle)
        return handle

    def release_all(self) -> None:
        """Release every owned handle now.  The scope can be reused afterwards."""
        while self._owned:
            handle = self._owned.pop()
            self._runtime.release(handle)
        logger.debug("HandleScope released all handles")

    def __len__(self) -> int:
        return len(self._owned)

    def __enter__(self) -> "HandleScope":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release_all()
