"""OrderedCollectionBridge — mutable native arrays of handles.

Collections are 0-based, contiguous and allow duplicates.  Every index and
element is validated on the managed side before the native call: a native
range exception cannot be caught across the boundary.

Two removal operations exist and must not be confused:

* :meth:`OrderedCollectionBridge.remove_first_equal` uses native equality
  (``isEqual:``);
* :meth:`OrderedCollectionBridge.remove_first_identical` uses object
  identity.

Collections retain what they hold.  Removing an element releases the
collection's reference but never destroys an object the caller still owns.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, MutableSequence
from typing import overload

from nsbridge.component import BridgeComponent
from nsbridge.errors import BridgeIndexError
from nsbridge.handles import Handle
from nsbridge.identity import IdentityBridge
from nsbridge.runtime.base import NOT_FOUND, NativeRuntime

logger = logging.getLogger(__name__)

#: Returned by :meth:`OrderedCollectionBridge.index_of` when nothing matches.
NOT_FOUND_INDEX = -1


def _require_element(element: Handle, operation: str) -> None:
    if not isinstance(element, Handle):
        raise TypeError(f"{operation}: expected a Handle, got {type(element).__name__}")
    if element.is_null:
        raise ValueError(f"{operation}: a null handle cannot be stored in a collection")


def _require_index(index: int) -> None:
    if not isinstance(index, int) or isinstance(index, bool):
        raise TypeError(f"Collection indices must be int, got {type(index).__name__}")


class OrderedCollectionBridge(BridgeComponent):
    """Creates and mutates native ordered collections."""

    def new_mutable_collection(self) -> Handle:
        """Create an owned, empty, mutable collection."""
        return self.runtime.new_mutable_array()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains(self, collection: Handle, element: Handle) -> bool:
        """Return True if an element equal to ``element`` is present."""
        if element.is_null:
            return False
        return self.runtime.array_contains(collection, element)

    def count(self, collection: Handle) -> int:
        return self.runtime.array_count(collection)

    def element_at(self, collection: Handle, index: int) -> Handle:
        """Return the borrowed element at ``index``.

        Raises
        ------
        BridgeIndexError
            If ``index`` is outside ``[0, count)``.
        """
        self._check_bounds(collection, index, "element_at")
        return self.runtime.array_object_at(collection, index)

    def index_of(self, collection: Handle, element: Handle) -> int:
        """Return the index of the first element equal to ``element``, or ``-1``."""
        if element.is_null:
            return NOT_FOUND_INDEX
        return self._from_native_index(self.runtime.array_index_of(collection, element))

    def index_of_identical(self, collection: Handle, element: Handle) -> int:
        """Return the index of ``element`` itself (identity), or ``-1``."""
        if element.is_null:
            return NOT_FOUND_INDEX
        return self._from_native_index(
            self.runtime.array_index_of_identical(collection, element)
        )

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def append(self, collection: Handle, element: Handle) -> None:
        _require_element(element, "append")
        self.runtime.array_add(collection, element)

    def insert_at(self, collection: Handle, element: Handle, index: int) -> None:
        """Insert ``element`` before ``index``.

        Raises
        ------
        BridgeIndexError
            If ``index`` is outside ``[0, count]``.
        """
        _require_element(element, "insert_at")
        _require_index(index)
        count = self.count(collection)
        if not 0 <= index <= count:
            raise BridgeIndexError(index, count, "insert_at")
        self.runtime.array_insert(collection, element, index)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_all(self, collection: Handle) -> None:
        self.runtime.array_remove_all(collection)

    def remove_first_equal(self, collection: Handle, element: Handle) -> None:
        """Remove the first element equal to ``element``; no-op when absent."""
        index = self.index_of(collection, element)
        if index != NOT_FOUND_INDEX:
            self.runtime.array_remove_at(collection, index)

    def remove_at(self, collection: Handle, index: int) -> None:
        """Remove the element at ``index``, shifting later elements down.

        Raises
        ------
        BridgeIndexError
            If ``index`` is outside ``[0, count)``.
        """
        self._check_bounds(collection, index, "remove_at")
        self.runtime.array_remove_at(collection, index)

    def remove_first_identical(self, collection: Handle, element: Handle) -> None:
        """Remove the first occurrence of ``element`` itself; no-op when absent.

        Equal but distinct objects are left in place.
        """
        index = self.index_of_identical(collection, element)
        if index != NOT_FOUND_INDEX:
            self.runtime.array_remove_at(collection, index)

    # ------------------------------------------------------------------
    # Replacement
    # ------------------------------------------------------------------

    def replace_at(self, collection: Handle, index: int, element: Handle) -> None:
        """Replace the element at ``index`` with ``element``.

        Raises
        ------
        BridgeIndexError
            If ``index`` is outside ``[0, count)``.
        """
        _require_element(element, "replace_at")
        self._check_bounds(collection, index, "replace_at")
        self.runtime.array_replace_at(collection, index, element)

    def swap(self, collection: Handle, first: int, second: int) -> None:
        """Exchange the elements at ``first`` and ``second``.

        Raises
        ------
        BridgeIndexError
            If either index is outside ``[0, count)``.
        """
        self._check_bounds(collection, first, "swap")
        self._check_bounds(collection, second, "swap")
        if first != second:
            self.runtime.array_exchange(collection, first, second)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_bounds(self, collection: Handle, index: int, operation: str) -> None:
        _require_index(index)
        count = self.count(collection)
        if not 0 <= index < count:
            raise BridgeIndexError(index, count, operation)

    @staticmethod
    def _from_native_index(index: int) -> int:
        return NOT_FOUND_INDEX if index == NOT_FOUND else index


class HandleList(MutableSequence[Handle]):
    """``MutableSequence`` view over a native collection handle.

    Indexing follows Python conventions (negative indices count from the
    end); slices are not supported.  ``in``, ``index``, ``count`` and
    ``remove`` use native equality.  The view does not own the collection;
    :meth:`pop` returns an owned handle.

    Parameters
    ----------
    collection:
        Handle of a mutable native collection.
    runtime:
        Runtime owning the collection; defaults to the initialised bridge's.
    """

    def __init__(self, collection: Handle, runtime: NativeRuntime | None = None) -> None:
        self._bridge = OrderedCollectionBridge(runtime)
        self.handle = collection

    @classmethod
    def new(cls, items: Iterable[Handle] = (), runtime: NativeRuntime | None = None) -> "HandleList":
        """Create a new owned collection filled with ``items``."""
        bridge = OrderedCollectionBridge(runtime)
        view = cls(bridge.new_mutable_collection(), runtime)
        view.extend(items)
        return view

    def _normalise(self, index: int, operation: str) -> int:
        _require_index(index)
        count = len(self)
        if index < 0:
            index += count
        if not 0 <= index < count:
            raise BridgeIndexError(index, count, operation)
        return index

    @overload
    def __getitem__(self, index: int) -> Handle: ...

    @overload
    def __getitem__(self, index: slice) -> MutableSequence[Handle]: ...

    def __getitem__(self, index: int | slice) -> Handle | MutableSequence[Handle]:
        if isinstance(index, slice):
            raise TypeError("HandleList does not support slicing")
        return self._bridge.element_at(self.handle, self._normalise(index, "element_at"))

    def __setitem__(self, index: int | slice, value: Handle | Iterable[Handle]) -> None:  # type: ignore[override]
        if isinstance(index, slice):
            raise TypeError("HandleList does not support slicing")
        self._bridge.replace_at(self.handle, self._normalise(index, "replace_at"), value)  # type: ignore[arg-type]

    def __delitem__(self, index: int | slice) -> None:
        if isinstance(index, slice):
            raise TypeError("HandleList does not support slicing")
        self._bridge.remove_at(self.handle, self._normalise(index, "remove_at"))

    def __len__(self) -> int:
        return self._bridge.count(self.handle)

    def __iter__(self) -> Iterator[Handle]:
        for index in range(len(self)):
            yield self._bridge.element_at(self.handle, index)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, Handle) and self._bridge.contains(self.handle, value)

    def insert(self, index: int, value: Handle) -> None:
        # list.insert semantics: out-of-range positions clamp to the ends.
        count = len(self)
        if index < 0:
            index = max(0, index + count)
        self._bridge.insert_at(self.handle, value, min(index, count))

    def append(self, value: Handle) -> None:
        self._bridge.append(self.handle, value)

    def clear(self) -> None:
        self._bridge.remove_all(self.handle)

    def index(self, value: Handle, start: int = 0, stop: int | None = None) -> int:
        """Return the first index in ``[start, stop)`` holding an element equal to ``value``.

        Raises
        ------
        ValueError
            If no such element exists.
        """
        count = len(self)
        start, stop, _ = slice(start, stop).indices(count)
        if isinstance(value, Handle) and not value.is_null:
            identity = IdentityBridge(self._bridge.runtime)
            for index in range(start, stop):
                if identity.equal(self._bridge.element_at(self.handle, index), value):
                    return index
        raise ValueError(f"{value!r} is not in the collection")

    def count(self, value: Handle) -> int:  # type: ignore[override]
        """Return the number of elements equal to ``value``."""
        if not isinstance(value, Handle) or value.is_null:
            return 0
        identity = IdentityBridge(self._bridge.runtime)
        return sum(1 for element in self if identity.equal(element, value))

    def pop(self, index: int = -1) -> Handle:
        """Remove and return the element at ``index``.

        The returned handle is owned: the caller must release it.
        """
        index = self._normalise(index, "remove_at")
        element = self._bridge.runtime.retain(self._bridge.element_at(self.handle, index))
        self._bridge.remove_at(self.handle, index)
        return element

    def reverse(self) -> None:
        # Swaps in place; never reads an element out across a release.
        count = len(self)
        for index in range(count // 2):
            self._bridge.swap(self.handle, index, count - 1 - index)

    def remove(self, value: Handle) -> None:
        """Remove the first element equal to ``value``; ``ValueError`` when absent."""
        if self._bridge.index_of(self.handle, value) == NOT_FOUND_INDEX:
            raise ValueError(f"{value!r} is not in the collection")
        self._bridge.remove_first_equal(self.handle, value)

    def remove_identical(self, value: Handle) -> None:
        """Remove ``value`` itself if present; equal objects are left alone."""
        self._bridge.remove_first_identical(self.handle, value)

    def swap(self, first: int, second: int) -> None:
        self._bridge.swap(
            self.handle, self._normalise(first, "swap"), self._normalise(second, "swap")
        )

    def __repr__(self) -> str:
        return f"HandleList({self.handle!r}, count={len(self)})"
