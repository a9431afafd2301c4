"""nsbridge — marshalling primitives between Python and a native object runtime.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import nsbridge

    # Initialise once at process start
    bridge = nsbridge.init_bridge()

    with nsbridge.HandleScope(bridge.runtime) as scope:
        # Text
        title = scope.own(bridge.scalars.text_to_native("Build finished"))

        # Actions
        action = scope.own(bridge.actions.new_action("open-action", "Open"))
        bridge.actions.action_title(action)          # "Open"

        # Dates always go through calendar fields
        calendar = nsbridge.Calendar(timezone="Europe/Berlin")
        fields = scope.own(bridge.dates.fields_to_native(
            nsbridge.CalendarFields(day=1, month=6, year=2030, hour=9, minute=0, second=0)
        ))
        date = scope.own(bridge.dates.to_date(fields, calendar))

        # Ordered collections of handles
        actions = nsbridge.HandleList.new([action], bridge.runtime)
        scope.own(actions.handle)
        len(actions)                                  # 1

    nsbridge.__version__
    '0.1.0'
"""
from __future__ import annotations

__version__: str = "0.1.0"

from nsbridge.actions import ActionBridge
from nsbridge.arrays import HandleList, OrderedCollectionBridge
from nsbridge.bridge import (
    Bridge,
    bridge_ready,
    get_bridge,
    init_bridge,
    shutdown_bridge,
)
from nsbridge.config import BridgeConfig, load_config
from nsbridge.dates import Calendar, CalendarFields, DateComponentBridge
from nsbridge.errors import (
    BridgeError,
    BridgeIndexError,
    BridgeNotReadyError,
    ConfigError,
    EncodingError,
    RuntimeAlreadyRegisteredError,
    RuntimeNotFoundError,
    RuntimeUnavailableError,
    StaleHandleError,
)
from nsbridge.handles import Handle, HandleScope, scoped
from nsbridge.identity import IdentityBridge, NativeKey
from nsbridge.runtime import NativeRuntime, ReferenceRuntime, runtimes
from nsbridge.scalars import ActivationType, ScalarBridge

__all__ = [
    "__version__",
    "ActionBridge",
    "ActivationType",
    "Bridge",
    "BridgeConfig",
    "BridgeError",
    "BridgeIndexError",
    "BridgeNotReadyError",
    "Calendar",
    "CalendarFields",
    "ConfigError",
    "DateComponentBridge",
    "EncodingError",
    "Handle",
    "HandleList",
    "HandleScope",
    "IdentityBridge",
    "NativeKey",
    "NativeRuntime",
    "OrderedCollectionBridge",
    "ReferenceRuntime",
    "RuntimeAlreadyRegisteredError",
    "RuntimeNotFoundError",
    "RuntimeUnavailableError",
    "ScalarBridge",
    "StaleHandleError",
    "bridge_ready",
    "get_bridge",
    "init_bridge",
    "load_config",
    "runtimes",
    "scoped",
    "shutdown_bridge",
]
