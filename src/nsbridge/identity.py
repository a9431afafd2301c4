"""IdentityBridge — native equality and hashing.

``Handle == Handle`` is identity.  Value equality belongs to the native
runtime, and this module is the only way to ask for it.
"""
from __future__ import annotations

from nsbridge.component import BridgeComponent
from nsbridge.handles import Handle
from nsbridge.runtime.base import NativeRuntime


class IdentityBridge(BridgeComponent):
    """Delegates equality and hashing to the native runtime."""

    def equal(self, first: Handle, second: Handle) -> bool:
        """Return True if the native runtime considers the objects equal.

        Two null handles are equal; a null and a non-null handle are not.
        """
        if first.is_null or second.is_null:
            return first.is_null and second.is_null
        if first == second:
            return True
        return self.runtime.is_equal(first, second)

    def hash(self, handle: Handle) -> int:
        """Return the native hash; equal objects hash equally."""
        if handle.is_null:
            return 0
        return self.runtime.hash(handle)


class NativeKey:
    """Hashable wrapper giving a handle native equality semantics.

    Useful for deduplicating handles in ``set`` and ``dict``::

        unique = {NativeKey(h, runtime) for h in handles}

    Parameters
    ----------
    handle:
        The wrapped (borrowed) handle.
    runtime:
        Runtime owning the object; defaults to the initialised bridge's.
    """

    __slots__ = ("handle", "_identity")

    def __init__(self, handle: Handle, runtime: NativeRuntime | None = None) -> None:
        self.handle = handle
        self._identity = IdentityBridge(runtime)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NativeKey):
            return NotImplemented
        return self._identity.equal(self.handle, other.handle)

    def __hash__(self) -> int:
        return self._identity.hash(self.handle)

    def __repr__(self) -> str:
        return f"NativeKey({self.handle!r})"
