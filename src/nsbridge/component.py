"""Shared base for the bridge components."""
from __future__ import annotations

from nsbridge.runtime.base import NativeRuntime


class BridgeComponent:
    """A stateless bridge bound to one native runtime.

    Parameters
    ----------
    runtime:
        The runtime to call into.  When omitted, the runtime of the bridge
        initialised by :func:`nsbridge.bridge.init_bridge` is used; the
        lookup happens on every access so a component can be created
        before initialisation.
    """

    def __init__(self, runtime: NativeRuntime | None = None) -> None:
        self._runtime = runtime

    @property
    def runtime(self) -> NativeRuntime:
        """The runtime this component calls into."""
        if self._runtime is not None:
            return self._runtime
        from nsbridge.bridge import get_bridge

        return get_bridge().runtime

    def __repr__(self) -> str:
        bound = self._runtime.name if self._runtime is not None else "<global>"
        return f"{type(self).__name__}(runtime={bound})"
