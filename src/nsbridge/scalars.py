"""ScalarBridge — text, images and activation types.

Text crosses the boundary as NUL-terminated UTF-8.  Anything that cannot
survive that trip (lone surrogates, embedded NUL characters) is rejected
with :class:`~nsbridge.errors.EncodingError` before the native call.
"""
from __future__ import annotations

import logging
import os
from enum import IntEnum

from nsbridge.component import BridgeComponent
from nsbridge.errors import EncodingError
from nsbridge.handles import Handle

logger = logging.getLogger(__name__)


class ActivationType(IntEnum):
    """Native ``NSUserNotificationActivationType`` values."""

    NONE = 0
    CONTENTS_CLICKED = 1
    ACTION_BUTTON_CLICKED = 2
    REPLIED = 3
    ADDITIONAL_ACTION_CLICKED = 4

    @property
    def native_name(self) -> str:
        """The name used at the managed boundary, e.g. ``"contentsClicked"``."""
        return _NATIVE_NAMES[self]


_NATIVE_NAMES: dict[ActivationType, str] = {
    ActivationType.NONE: "none",
    ActivationType.CONTENTS_CLICKED: "contentsClicked",
    ActivationType.ACTION_BUTTON_CLICKED: "actionButtonClicked",
    ActivationType.REPLIED: "replied",
    ActivationType.ADDITIONAL_ACTION_CLICKED: "additionalActionClicked",
}
_BY_NAME: dict[str, ActivationType] = {name: member for member, name in _NATIVE_NAMES.items()}

#: Returned by :meth:`ScalarBridge.native_to_activation_type` for values
#: outside the known set.
UNKNOWN_ACTIVATION_TYPE = "unknown"


def encode_text(text: str) -> bytes:
    """Encode ``text`` for a native string constructor.

    Raises
    ------
    EncodingError
        If ``text`` has no UTF-8 form or contains a NUL character.
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")
    if "\x00" in text:
        raise EncodingError(text, "embedded NUL characters cannot cross a C string boundary")
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(text, exc.reason) from exc


class ScalarBridge(BridgeComponent):
    """Converts scalar managed values to and from native handles."""

    def text_to_native(self, text: str) -> Handle:
        """Create an owned native string holding ``text``.

        Raises
        ------
        EncodingError
            If ``text`` cannot be represented as a native string.
        """
        handle = self.runtime.string_with_utf8(encode_text(text))
        if handle.is_null:
            raise EncodingError(text, "the native runtime rejected the UTF-8 data")
        return handle

    def native_to_text(self, handle: Handle) -> str | None:
        """Return the text of a native string, or ``None`` for a null handle."""
        data = self.runtime.utf8_string(handle)
        if data is None:
            return None
        return data.decode("utf-8")

    def image_from_path(self, path: str | os.PathLike[str]) -> Handle | None:
        """Load an image from ``path``.

        Returns ``None`` when nothing could be decoded, including when the
        file does not exist.  The caller must check the result.
        """
        handle = self.runtime.image_with_contents_of_file(os.fspath(path))
        if handle.is_null:
            logger.debug("No image could be decoded from %s", path)
            return None
        return handle

    def activation_type_to_native(self, name: str | ActivationType) -> Handle:
        """Map an activation-type name to its native enumerated value.

        Unrecognised names map to ``none`` and are logged; this is not an
        error.
        """
        if isinstance(name, ActivationType):
            return Handle(int(name))
        member = _BY_NAME.get(name)
        if member is None:
            logger.warning("Unknown activation type %r; using %r", name, "none")
            member = ActivationType.NONE
        return Handle(int(member))

    def native_to_activation_type(self, handle: Handle) -> str:
        """Map a native activation-type value back to its name.

        Values outside the known set yield ``"unknown"``.
        """
        try:
            return ActivationType(handle.address).native_name
        except ValueError:
            return UNKNOWN_ACTIVATION_TYPE
