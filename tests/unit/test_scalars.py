"""Unit tests for nsbridge.scalars — text, images and activation types."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest
from PIL import Image

from nsbridge import Bridge, EncodingError, Handle
from nsbridge.scalars import ActivationType, encode_text


# ===========================================================================
# Text
# ===========================================================================


class TestText:
    @pytest.mark.parametrize("text", ["", "hello", "grüße", "日本語", "emoji 🎉"])
    def test_round_trip(self, bridge: Bridge, text: str) -> None:
        handle = bridge.scalars.text_to_native(text)
        assert bridge.scalars.native_to_text(handle) == text

    def test_returns_owned_handle(self, bridge: Bridge) -> None:
        handle = bridge.scalars.text_to_native("x")
        assert bridge.runtime.retain_count(handle) == 1

    def test_null_handle_reads_as_none(self, bridge: Bridge) -> None:
        assert bridge.scalars.native_to_text(Handle.NULL) is None

    def test_lone_surrogate_raises_encoding_error(self, bridge: Bridge) -> None:
        with pytest.raises(EncodingError) as info:
            bridge.scalars.text_to_native("bad \ud800 text")
        assert info.value.text == "bad \ud800 text"

    def test_embedded_nul_raises_encoding_error(self, bridge: Bridge) -> None:
        with pytest.raises(EncodingError, match="NUL"):
            bridge.scalars.text_to_native("a\x00b")

    def test_encoding_error_is_value_error(self, bridge: Bridge) -> None:
        with pytest.raises(ValueError):
            bridge.scalars.text_to_native("\udfff")

    def test_failed_conversion_allocates_nothing(self, bridge: Bridge) -> None:
        with pytest.raises(EncodingError):
            bridge.scalars.text_to_native("\ud800")
        assert bridge.runtime.live_objects == 0

    def test_non_str_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            encode_text(b"bytes")  # type: ignore[arg-type]


# ===========================================================================
# Images
# ===========================================================================


class TestImages:
    def test_decodes_image(self, bridge: Bridge, tmp_path: Path) -> None:
        path = tmp_path / "icon.png"
        Image.new("RGBA", (8, 8)).save(path)
        handle = bridge.scalars.image_from_path(path)
        assert handle is not None and handle

    def test_accepts_str_path(self, bridge: Bridge, tmp_path: Path) -> None:
        path = tmp_path / "icon.gif"
        Image.new("L", (2, 2)).save(path)
        assert bridge.scalars.image_from_path(str(path)) is not None

    def test_missing_file_returns_none(self, bridge: Bridge, tmp_path: Path) -> None:
        assert bridge.scalars.image_from_path(tmp_path / "missing.png") is None

    def test_undecodable_file_returns_none(self, bridge: Bridge, tmp_path: Path) -> None:
        path = tmp_path / "fake.png"
        path.write_bytes(b"\x89PNG not really")
        assert bridge.scalars.image_from_path(path) is None


# ===========================================================================
# Activation types
# ===========================================================================


class TestActivationTypes:
    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("none", 0),
            ("contentsClicked", 1),
            ("actionButtonClicked", 2),
            ("replied", 3),
            ("additionalActionClicked", 4),
        ],
    )
    def test_known_names(self, bridge: Bridge, name: str, value: int) -> None:
        handle = bridge.scalars.activation_type_to_native(name)
        assert handle.address == value
        assert bridge.scalars.native_to_activation_type(handle) == name

    def test_accepts_enum_member(self, bridge: Bridge) -> None:
        handle = bridge.scalars.activation_type_to_native(ActivationType.REPLIED)
        assert bridge.scalars.native_to_activation_type(handle) == "replied"

    def test_unknown_name_maps_to_none_with_warning(
        self, bridge: Bridge, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="nsbridge.scalars"):
            handle = bridge.scalars.activation_type_to_native("doubleClicked")
        assert bridge.scalars.native_to_activation_type(handle) == "none"
        assert "doubleClicked" in caplog.text

    def test_unknown_native_value(self, bridge: Bridge) -> None:
        assert bridge.scalars.native_to_activation_type(Handle(99)) == "unknown"

    def test_native_name_property(self) -> None:
        assert ActivationType.ACTION_BUTTON_CLICKED.native_name == "actionButtonClicked"
