"""Error types for the nsbridge marshalling layer.

Every failure raised by a bridge is local and synchronous: it is reported
to the immediate caller and nothing is retried.  "Absence" results such as
a null handle, a ``-1`` index or an unspecified calendar field are normal
return values and are *not* represented here.

Each error also subclasses the closest built-in exception so that callers
can catch ``IndexError`` or ``ValueError`` without importing this module.
"""
from __future__ import annotations


class BridgeError(Exception):
    """Base class for all nsbridge errors."""


class EncodingError(BridgeError, ValueError):
    """Raised when text cannot be represented as a native string.

    Parameters
    ----------
    text:
        The offending managed text.
    reason:
        Why the conversion is impossible.
    """

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Cannot convert {text!r} to a native string: {reason}")


class BridgeIndexError(BridgeError, IndexError):
    """Raised when an index lies outside a collection's valid bounds.

    Parameters
    ----------
    index:
        The rejected index.
    count:
        Number of elements in the collection at the time of the call.
    operation:
        Name of the bridge operation that rejected the index.
    """

    def __init__(self, index: int, count: int, operation: str) -> None:
        self.index = index
        self.count = count
        self.operation = operation
        super().__init__(
            f"{operation}: index {index} is out of range for a collection "
            f"of {count} element(s)"
        )


class BridgeNotReadyError(BridgeError, RuntimeError):
    """Raised when the bridge is used before ``init_bridge()`` was called."""

    def __init__(self) -> None:
        super().__init__(
            "The native bridge has not been initialised. "
            "Call nsbridge.init_bridge() once at process start."
        )


class RuntimeUnavailableError(BridgeError, RuntimeError):
    """Raised when a native runtime backend cannot be loaded on this host."""

    def __init__(self, runtime_name: str, reason: str) -> None:
        self.runtime_name = runtime_name
        self.reason = reason
        super().__init__(f"Native runtime {runtime_name!r} is unavailable: {reason}")


class RuntimeNotFoundError(BridgeError, KeyError):
    """Raised when a requested runtime name is not in the registry."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.runtime_name = name
        self.available = available
        super().__init__(
            f"Runtime {name!r} is not registered. "
            f"Available runtimes: {', '.join(available) or '(none)'}. "
            "Check that the package is installed and its entry-points are declared."
        )


class RuntimeAlreadyRegisteredError(BridgeError, ValueError):
    """Raised when attempting to register a runtime name that already exists."""

    def __init__(self, name: str) -> None:
        self.runtime_name = name
        super().__init__(
            f"Runtime {name!r} is already registered. "
            "Use a unique name or explicitly deregister the existing entry first."
        )


class StaleHandleError(BridgeError, ValueError):
    """Raised when a handle does not refer to a live native object.

    Only runtimes that track their objects (the reference runtime) can
    detect this; the Objective-C runtime cannot.
    """

    def __init__(self, address: int, detail: str = "") -> None:
        self.address = address
        message = f"Handle 0x{address:x} does not refer to a live native object"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConfigError(BridgeError, ValueError):
    """Raised for invalid bridge configuration values or files."""
