"""CLI package.

The ``cli`` sub-package contains the Click diagnostics application. It
should import only from the public API of the parent package, never from
internal submodules directly.
"""
from __future__ import annotations
