"""Shared test fixtures for nsbridge.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from nsbridge import Bridge, Calendar, ReferenceRuntime, shutdown_bridge


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "nsbridge"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture(autouse=True)
def _isolated_bridge(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the process-wide bridge and NSBRIDGE_* variables out of each test."""
    for var in ("NSBRIDGE_CONFIG", "NSBRIDGE_RUNTIME", "NSBRIDGE_CALENDAR", "NSBRIDGE_TIMEZONE"):
        monkeypatch.delenv(var, raising=False)
    shutdown_bridge()
    yield
    shutdown_bridge()


@pytest.fixture()
def runtime() -> ReferenceRuntime:
    """A fresh reference runtime with no live objects."""
    return ReferenceRuntime()


@pytest.fixture()
def bridge(runtime: ReferenceRuntime) -> Bridge:
    """All bridge components bound to the fresh reference runtime."""
    return Bridge(runtime=runtime)


@pytest.fixture()
def utc() -> Calendar:
    return Calendar(timezone="UTC")


@pytest.fixture()
def berlin() -> Calendar:
    return Calendar(timezone="Europe/Berlin")
