"""Unit tests for nsbridge.bridge — explicit initialisation and the Bridge facade."""
from __future__ import annotations

import logging
import sys

import pytest

import nsbridge
from nsbridge import (
    Bridge,
    BridgeConfig,
    BridgeNotReadyError,
    ReferenceRuntime,
    RuntimeNotFoundError,
    RuntimeUnavailableError,
    bridge_ready,
    get_bridge,
    init_bridge,
    shutdown_bridge,
)
from nsbridge.bridge import select_runtime
from nsbridge.scalars import ScalarBridge


class TestLifecycle:
    def test_not_ready_before_init(self) -> None:
        assert not bridge_ready()

    def test_get_bridge_before_init_raises(self) -> None:
        with pytest.raises(BridgeNotReadyError):
            get_bridge()

    def test_not_ready_error_is_runtime_error(self) -> None:
        with pytest.raises(RuntimeError):
            get_bridge()

    def test_init_makes_ready(self) -> None:
        bridge = init_bridge(BridgeConfig(runtime="reference"))
        assert bridge_ready()
        assert get_bridge() is bridge
        assert bridge.runtime_name == "reference"

    def test_init_is_idempotent(self) -> None:
        first = init_bridge(BridgeConfig(runtime="reference"))
        second = init_bridge(BridgeConfig(runtime="reference"))
        assert first is second

    def test_differing_config_while_active_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        first = init_bridge(BridgeConfig(runtime="reference", timezone="UTC"))
        with caplog.at_level(logging.WARNING, logger="nsbridge.bridge"):
            second = init_bridge(BridgeConfig(runtime="reference", timezone="Asia/Tokyo"))
        assert second is first
        assert second.config.timezone == "UTC"
        assert "shutdown_bridge" in caplog.text

    def test_same_config_while_active_is_silent(self, caplog: pytest.LogCaptureFixture) -> None:
        init_bridge(BridgeConfig(runtime="reference"))
        with caplog.at_level(logging.WARNING, logger="nsbridge.bridge"):
            init_bridge(BridgeConfig(runtime="reference"))
            init_bridge()
        assert caplog.text == ""

    def test_same_runtime_instance_is_accepted(self) -> None:
        runtime = ReferenceRuntime()
        first = init_bridge(runtime=runtime)
        assert init_bridge(runtime=runtime) is first

    def test_different_runtime_while_active_raises(self) -> None:
        init_bridge(runtime=ReferenceRuntime())
        with pytest.raises(RuntimeError, match="shutdown_bridge"):
            init_bridge(runtime=ReferenceRuntime())

    def test_shutdown_closes_runtime(self) -> None:
        bridge = init_bridge(BridgeConfig(runtime="reference"))
        bridge.scalars.text_to_native("left behind")
        shutdown_bridge()
        assert not bridge_ready()
        assert bridge.runtime.live_objects == 0

    def test_shutdown_when_not_ready_is_noop(self) -> None:
        shutdown_bridge()
        assert not bridge_ready()

    def test_reinit_after_shutdown(self) -> None:
        first = init_bridge(BridgeConfig(runtime="reference"))
        shutdown_bridge()
        second = init_bridge(BridgeConfig(runtime="reference"))
        assert first is not second

    def test_init_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NSBRIDGE_RUNTIME", "reference")
        monkeypatch.setenv("NSBRIDGE_TIMEZONE", "Europe/Berlin")
        bridge = init_bridge()
        assert bridge.runtime_name == "reference"
        assert bridge.config.timezone == "Europe/Berlin"

    def test_init_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="nsbridge.bridge"):
            init_bridge(BridgeConfig(runtime="reference"))
        assert "Native bridge ready" in caplog.text

    def test_module_exports(self) -> None:
        assert nsbridge.init_bridge is init_bridge
        assert nsbridge.bridge_ready is bridge_ready


class TestSelectRuntime:
    def test_named_runtime(self) -> None:
        assert isinstance(select_runtime(BridgeConfig(runtime="reference")), ReferenceRuntime)

    def test_unknown_runtime(self) -> None:
        with pytest.raises(RuntimeNotFoundError) as info:
            select_runtime(BridgeConfig(runtime="cocotron"))
        assert "reference" in info.value.available

    @pytest.mark.skipif(sys.platform == "darwin", reason="objc loads on macOS")
    def test_auto_falls_back_to_reference_off_macos(self) -> None:
        assert isinstance(select_runtime(BridgeConfig()), ReferenceRuntime)

    @pytest.mark.skipif(sys.platform == "darwin", reason="objc loads on macOS")
    def test_objc_unavailable_off_macos(self) -> None:
        with pytest.raises(RuntimeUnavailableError, match="objc"):
            select_runtime(BridgeConfig(runtime="objc"))

    @pytest.mark.skipif(sys.platform == "darwin", reason="objc loads on macOS")
    def test_init_failure_leaves_bridge_uninitialised(self) -> None:
        with pytest.raises(RuntimeUnavailableError):
            init_bridge(BridgeConfig(runtime="objc"))
        assert not bridge_ready()


class TestBridgeFacade:
    def test_components_share_runtime(self, runtime: ReferenceRuntime) -> None:
        bridge = Bridge(runtime=runtime)
        for component in (bridge.scalars, bridge.dates, bridge.actions, bridge.arrays, bridge.identity):
            assert component.runtime is runtime

    def test_default_config(self, runtime: ReferenceRuntime) -> None:
        assert Bridge(runtime=runtime).config == BridgeConfig()

    def test_unbound_component_uses_active_bridge(self) -> None:
        scalars = ScalarBridge()
        with pytest.raises(BridgeNotReadyError):
            scalars.text_to_native("x")
        bridge = init_bridge(BridgeConfig(runtime="reference"))
        handle = scalars.text_to_native("x")
        assert bridge.scalars.native_to_text(handle) == "x"

    def test_component_repr(self, runtime: ReferenceRuntime) -> None:
        assert repr(ScalarBridge(runtime)) == "ScalarBridge(runtime=reference)"
        assert repr(ScalarBridge()) == "ScalarBridge(runtime=<global>)"
