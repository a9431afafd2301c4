"""Unit tests for nsbridge.handles — Handle, scoped and HandleScope."""
from __future__ import annotations

import ctypes

import pytest

from nsbridge.errors import StaleHandleError
from nsbridge.handles import Handle, HandleScope, scoped
from nsbridge.runtime.reference import ReferenceRuntime


# ===========================================================================
# Handle
# ===========================================================================


class TestHandle:
    def test_null_is_falsy(self) -> None:
        assert not Handle.NULL
        assert Handle.NULL.is_null

    def test_non_null_is_truthy(self) -> None:
        assert Handle(0x10)
        assert not Handle(0x10).is_null

    def test_equality_is_by_address(self) -> None:
        assert Handle(0x20) == Handle(0x20)
        assert Handle(0x20) != Handle(0x30)

    def test_hashable(self) -> None:
        assert len({Handle(1), Handle(1), Handle(2)}) == 2

    def test_immutable(self) -> None:
        handle = Handle(0x40)
        with pytest.raises(AttributeError):
            handle.address = 0x50  # type: ignore[misc]

    def test_no_arithmetic(self) -> None:
        with pytest.raises(TypeError):
            Handle(0x40) + 1  # type: ignore[operator]

    def test_rejects_negative_address(self) -> None:
        with pytest.raises(ValueError):
            Handle(-1)

    def test_rejects_non_int_address(self) -> None:
        with pytest.raises(TypeError):
            Handle("0x10")  # type: ignore[arg-type]

    def test_rejects_bool_address(self) -> None:
        with pytest.raises(TypeError):
            Handle(True)  # type: ignore[arg-type]

    def test_repr_null(self) -> None:
        assert repr(Handle.NULL) == "Handle(NULL)"

    def test_repr_hex(self) -> None:
        assert repr(Handle(255)) == "Handle(0xff)"

    def test_from_pointer_none_is_null(self) -> None:
        assert Handle.from_pointer(None) is not None
        assert Handle.from_pointer(None).is_null

    def test_from_pointer_value(self) -> None:
        assert Handle.from_pointer(0x1234) == Handle(0x1234)

    def test_as_parameter_is_void_pointer(self) -> None:
        param = Handle(0x1234)._as_parameter_
        assert isinstance(param, ctypes.c_void_p)
        assert param.value == 0x1234

    def test_null_as_parameter_is_none_pointer(self) -> None:
        assert Handle.NULL._as_parameter_.value is None


# ===========================================================================
# scoped
# ===========================================================================


class TestScoped:
    def test_releases_on_exit(self, runtime: ReferenceRuntime) -> None:
        handle = runtime.string_with_utf8(b"x")
        with scoped(runtime, handle) as inner:
            assert inner is handle
            assert runtime.is_live(handle)
        assert not runtime.is_live(handle)

    def test_releases_on_error(self, runtime: ReferenceRuntime) -> None:
        handle = runtime.string_with_utf8(b"x")
        with pytest.raises(RuntimeError):
            with scoped(runtime, handle):
                raise RuntimeError("boom")
        assert not runtime.is_live(handle)

    def test_null_handle_is_not_released(self, runtime: ReferenceRuntime) -> None:
        with scoped(runtime, Handle.NULL) as inner:
            assert inner.is_null


# ===========================================================================
# HandleScope
# ===========================================================================


class TestHandleScope:
    def test_own_returns_handle(self, runtime: ReferenceRuntime) -> None:
        with HandleScope(runtime) as scope:
            handle = runtime.string_with_utf8(b"x")
            assert scope.own(handle) is handle
            assert len(scope) == 1

    def test_releases_everything_on_exit(self, runtime: ReferenceRuntime) -> None:
        with HandleScope(runtime) as scope:
            for text in (b"a", b"b", b"c"):
                scope.own(runtime.string_with_utf8(text))
        assert runtime.live_objects == 0

    def test_null_is_not_owned(self, runtime: ReferenceRuntime) -> None:
        scope = HandleScope(runtime)
        scope.own(Handle.NULL)
        assert len(scope) == 0

    def test_reverse_order_lets_container_go_first(self, runtime: ReferenceRuntime) -> None:
        with HandleScope(runtime) as scope:
            element = scope.own(runtime.string_with_utf8(b"elem"))
            array = scope.own(runtime.new_mutable_array())
            runtime.array_add(array, element)
        assert runtime.live_objects == 0

    def test_release_all_is_reusable(self, runtime: ReferenceRuntime) -> None:
        scope = HandleScope(runtime)
        scope.own(runtime.string_with_utf8(b"a"))
        scope.release_all()
        assert len(scope) == 0
        scope.own(runtime.string_with_utf8(b"b"))
        scope.release_all()
        assert runtime.live_objects == 0

    def test_double_release_is_detected(self, runtime: ReferenceRuntime) -> None:
        handle = runtime.string_with_utf8(b"x")
        with HandleScope(runtime) as scope:
            scope.own(handle)
        with pytest.raises(StaleHandleError):
            runtime.release(handle)
