"""Runtime registry for nsbridge.

Native runtime backends register under a short name.  The built-in
backends (``objc`` and ``reference``) register themselves at import time
with the decorator; third-party backends declare entry-points in their own
``pyproject.toml`` under the "nsbridge.runtimes" group.

Example
-------
Register a backend with the decorator::

    from nsbridge.runtime.base import NativeRuntime
    from nsbridge.runtime.registry import runtimes

    @runtimes.register("recording")
    class RecordingRuntime(NativeRuntime):
        ...

Load all installed backends via entry-points::

    runtimes.load_entrypoints("nsbridge.runtimes")

Retrieve a backend by name::

    cls = runtimes.get("reference")
    runtime = cls()
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable

from nsbridge.errors import RuntimeAlreadyRegisteredError, RuntimeNotFoundError
from nsbridge.runtime.base import NativeRuntime

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "nsbridge.runtimes"


class RuntimeRegistry:
    """Name → :class:`NativeRuntime` subclass registry.

    Registration order is preserved and decides which backend ``auto``
    selection prefers: the first registered backend that reports itself
    available wins.
    """

    def __init__(self) -> None:
        self._runtimes: dict[str, type[NativeRuntime]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[NativeRuntime]], type[NativeRuntime]]:
        """Return a class decorator that registers the decorated runtime.

        Raises
        ------
        RuntimeAlreadyRegisteredError
            If ``name`` is already in use.
        TypeError
            If the decorated class does not subclass ``NativeRuntime``.
        """

        def decorator(cls: type[NativeRuntime]) -> type[NativeRuntime]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[NativeRuntime]) -> None:
        """Register ``cls`` under ``name`` without decorator syntax."""
        if name in self._runtimes:
            raise RuntimeAlreadyRegisteredError(name)
        if not (isinstance(cls, type) and issubclass(cls, NativeRuntime)):
            raise TypeError(
                f"Cannot register {cls!r} under {name!r}: "
                "it must be a subclass of NativeRuntime."
            )
        cls.name = name
        self._runtimes[name] = cls
        logger.debug("Registered runtime %r -> %s", name, cls.__qualname__)

    def deregister(self, name: str) -> None:
        """Remove a runtime from the registry.

        Raises
        ------
        RuntimeNotFoundError
            If ``name`` is not currently registered.
        """
        if name not in self._runtimes:
            raise RuntimeNotFoundError(name, self.list_runtimes())
        del self._runtimes[name]
        logger.debug("Deregistered runtime %r", name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type[NativeRuntime]:
        """Return the runtime class registered under ``name``.

        Raises
        ------
        RuntimeNotFoundError
            If no runtime is registered under ``name``.
        """
        try:
            return self._runtimes[name]
        except KeyError:
            raise RuntimeNotFoundError(name, self.list_runtimes()) from None

    def list_runtimes(self) -> list[str]:
        """Return registered runtime names in registration order."""
        return list(self._runtimes)

    def available(self) -> list[str]:
        """Return the names of runtimes that can load on this host."""
        return [name for name, cls in self._runtimes.items() if cls.is_available()]

    def __contains__(self, name: object) -> bool:
        return name in self._runtimes

    def __len__(self) -> int:
        return len(self._runtimes)

    def __repr__(self) -> str:
        return f"RuntimeRegistry(runtimes={self.list_runtimes()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Discover and register runtimes declared as package entry-points.

        Entry-points whose name is already registered are skipped, which
        makes repeated calls idempotent.  Entry-points that fail to import
        or are not ``NativeRuntime`` subclasses are logged and skipped.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._runtimes:
                logger.debug("Entry-point %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load entry-point %r from group %r; skipping.",
                    ep.name,
                    group,
                )
                continue
            try:
                self.register_class(ep.name, cls)
            except (RuntimeAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered; skipping.",
                    ep.name,
                )


#: Process-wide registry used by :func:`nsbridge.bridge.init_bridge`.
runtimes = RuntimeRegistry()
