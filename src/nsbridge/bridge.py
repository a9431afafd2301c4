"""Explicit bridge initialisation.

The native binding is set up once, at process start, by calling
:func:`init_bridge`.  Nothing is loaded implicitly at import time, and
:func:`bridge_ready` reports whether initialisation has happened.

Example
-------
::

    import nsbridge

    bridge = nsbridge.init_bridge()
    text = bridge.scalars.text_to_native("hello")
    try:
        assert bridge.scalars.native_to_text(text) == "hello"
    finally:
        bridge.runtime.release(text)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from nsbridge.actions import ActionBridge
from nsbridge.arrays import OrderedCollectionBridge
from nsbridge.config import BridgeConfig, load_config
from nsbridge.dates import DateComponentBridge
from nsbridge.errors import BridgeNotReadyError, RuntimeUnavailableError
from nsbridge.identity import IdentityBridge
from nsbridge.runtime import NativeRuntime, runtimes
from nsbridge.scalars import ScalarBridge

logger = logging.getLogger(__name__)

_active: "Bridge | None" = None


@dataclass
class Bridge:
    """The five bridge components bound to one runtime.

    Parameters
    ----------
    runtime:
        The native runtime every component calls into.
    config:
        The configuration the bridge was initialised with.
    """

    runtime: NativeRuntime
    config: BridgeConfig = field(default_factory=BridgeConfig)
    scalars: ScalarBridge = field(init=False)
    dates: DateComponentBridge = field(init=False)
    actions: ActionBridge = field(init=False)
    arrays: OrderedCollectionBridge = field(init=False)
    identity: IdentityBridge = field(init=False)

    def __post_init__(self) -> None:
        self.scalars = ScalarBridge(self.runtime)
        self.dates = DateComponentBridge(self.runtime)
        self.actions = ActionBridge(self.runtime)
        self.arrays = OrderedCollectionBridge(self.runtime)
        self.identity = IdentityBridge(self.runtime)

    @property
    def runtime_name(self) -> str:
        return self.runtime.name or type(self.runtime).__name__


def select_runtime(config: BridgeConfig) -> NativeRuntime:
    """Instantiate the runtime named by ``config.runtime``.

    ``"auto"`` picks the first registered runtime that reports itself
    available on this host.

    Raises
    ------
    RuntimeNotFoundError
        If the named runtime is not registered.
    RuntimeUnavailableError
        If the runtime cannot load on this host.
    """
    runtimes.load_entrypoints()
    if config.runtime == "auto":
        candidates = runtimes.available()
        if not candidates:
            raise RuntimeUnavailableError("auto", "no registered runtime is available")
        name = candidates[0]
    else:
        name = config.runtime
    cls = runtimes.get(name)
    if not cls.is_available():
        raise RuntimeUnavailableError(name, "not supported on this host")
    runtime = cls.from_config(config)
    logger.debug("Selected native runtime %r", name)
    return runtime


def init_bridge(
    config: BridgeConfig | None = None,
    runtime: NativeRuntime | None = None,
) -> Bridge:
    """Initialise the process-wide bridge.

    Calling again returns the active bridge unchanged, unless a different
    ``runtime`` instance is passed explicitly, which is an error while a
    bridge is active.  A differing ``config`` is ignored with a warning.

    Parameters
    ----------
    config:
        Settings to use; defaults to :func:`nsbridge.config.load_config`.
    runtime:
        An already constructed runtime, bypassing backend selection.

    Raises
    ------
    RuntimeError
        If a bridge is active and a different runtime is requested.
    """
    global _active
    if _active is not None:
        if runtime is not None and runtime is not _active.runtime:
            raise RuntimeError(
                "The bridge is already initialised with another runtime; "
                "call shutdown_bridge() first."
            )
        if config is not None and config != _active.config:
            logger.warning(
                "Bridge already initialised with %r; ignoring %r. "
                "Call shutdown_bridge() first to apply new settings.",
                _active.config,
                config,
            )
        return _active

    config = config or load_config()
    runtime = runtime or select_runtime(config)
    _active = Bridge(runtime=runtime, config=config)
    logger.info("Native bridge ready (runtime=%s)", _active.runtime_name)
    return _active


def bridge_ready() -> bool:
    """Return True once :func:`init_bridge` has succeeded."""
    return _active is not None


def get_bridge() -> Bridge:
    """Return the active bridge.

    Raises
    ------
    BridgeNotReadyError
        If :func:`init_bridge` has not been called.
    """
    if _active is None:
        raise BridgeNotReadyError()
    return _active


def shutdown_bridge() -> None:
    """Close the active runtime and forget the bridge.  No-op if not ready."""
    global _active
    if _active is None:
        return
    bridge, _active = _active, None
    bridge.runtime.close()
    logger.info("Native bridge shut down (runtime=%s)", bridge.runtime_name)
