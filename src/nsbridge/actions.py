"""ActionBridge — notification actions.

An action is an immutable (identifier, title) pair that exists only as a
native object.  Identifier uniqueness is the caller's concern.
"""
from __future__ import annotations

from nsbridge.component import BridgeComponent
from nsbridge.handles import Handle, HandleScope
from nsbridge.scalars import ScalarBridge


class ActionBridge(BridgeComponent):
    """Builds native actions and reads them back."""

    def new_action(self, identifier: str, title: str) -> Handle:
        """Create an owned native action.

        Raises
        ------
        EncodingError
            If either text cannot be represented as a native string.
        """
        scalars = ScalarBridge(self.runtime)
        with HandleScope(self.runtime) as scope:
            native_identifier = scope.own(scalars.text_to_native(identifier))
            native_title = scope.own(scalars.text_to_native(title))
            return self.runtime.new_notification_action(native_identifier, native_title)

    def action_identifier_handle(self, action: Handle) -> Handle:
        """Borrowed native string holding the action's identifier."""
        return self.runtime.action_identifier(action)

    def action_title_handle(self, action: Handle) -> Handle:
        """Borrowed native string holding the action's title."""
        return self.runtime.action_title(action)

    def action_identifier(self, action: Handle) -> str:
        return ScalarBridge(self.runtime).native_to_text(self.action_identifier_handle(action)) or ""

    def action_title(self, action: Handle) -> str:
        return ScalarBridge(self.runtime).native_to_text(self.action_title_handle(action)) or ""
