"""Unit tests for nsbridge.config — defaults, YAML files and environment overrides."""
from __future__ import annotations

from pathlib import Path

import pytest

from nsbridge import BridgeConfig, ConfigError, load_config


@pytest.fixture()
def config_file(tmp_path: Path):
    """Return a factory writing YAML text to a config file."""

    def write(text: str) -> Path:
        path = tmp_path / "nsbridge.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return write


class TestBridgeConfig:
    def test_defaults(self) -> None:
        config = BridgeConfig()
        assert config.runtime == "auto"
        assert config.calendar == "gregorian"
        assert config.timezone is None
        assert config.objc_path is None

    def test_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            BridgeConfig().runtime = "objc"  # type: ignore[misc]

    def test_empty_runtime_rejected(self) -> None:
        with pytest.raises(ConfigError):
            BridgeConfig(runtime="")

    def test_non_string_timezone_rejected(self) -> None:
        with pytest.raises(ConfigError, match="timezone"):
            BridgeConfig(timezone=3)  # type: ignore[arg-type]

    def test_from_mapping(self) -> None:
        config = BridgeConfig.from_mapping({"runtime": "reference", "timezone": "UTC"})
        assert config == BridgeConfig(runtime="reference", timezone="UTC")

    def test_from_mapping_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigError, match="locale"):
            BridgeConfig.from_mapping({"locale": "de_DE"})

    def test_with_environment(self) -> None:
        config = BridgeConfig().with_environment(
            {"NSBRIDGE_RUNTIME": "reference", "NSBRIDGE_CALENDAR": "iso8601"}
        )
        assert config.runtime == "reference"
        assert config.calendar == "iso8601"
        assert config.timezone is None

    def test_empty_environment_values_are_ignored(self) -> None:
        config = BridgeConfig(timezone="UTC").with_environment({"NSBRIDGE_TIMEZONE": ""})
        assert config.timezone == "UTC"


class TestLoadConfig:
    def test_no_file_no_environment(self) -> None:
        assert load_config(environ={}) == BridgeConfig()

    def test_reads_yaml_file(self, config_file) -> None:
        path = config_file("runtime: reference\ntimezone: Europe/Berlin\n")
        config = load_config(path, environ={})
        assert config.runtime == "reference"
        assert config.timezone == "Europe/Berlin"

    def test_accepts_str_path(self, config_file) -> None:
        path = config_file("calendar: iso8601\n")
        assert load_config(str(path), environ={}).calendar == "iso8601"

    def test_empty_file_gives_defaults(self, config_file) -> None:
        assert load_config(config_file(""), environ={}) == BridgeConfig()

    def test_environment_overrides_file(self, config_file) -> None:
        path = config_file("runtime: objc\ntimezone: UTC\n")
        config = load_config(path, environ={"NSBRIDGE_RUNTIME": "reference"})
        assert config.runtime == "reference"
        assert config.timezone == "UTC"

    def test_config_path_from_environment(self, config_file) -> None:
        path = config_file("timezone: Asia/Tokyo\n")
        assert load_config(environ={"NSBRIDGE_CONFIG": str(path)}).timezone == "Asia/Tokyo"

    def test_uses_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NSBRIDGE_CALENDAR", "iso8601")
        assert load_config().calendar == "iso8601"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "absent.yaml", environ={})

    def test_invalid_yaml(self, config_file) -> None:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file("runtime: [unclosed\n"), environ={})

    def test_non_mapping_document(self, config_file) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file("- reference\n- objc\n"), environ={})

    def test_unknown_key_in_file(self, config_file) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration key"):
            load_config(config_file("runtime: reference\nverbose: true\n"), environ={})

    def test_config_error_is_value_error(self, config_file) -> None:
        with pytest.raises(ValueError):
            load_config(config_file("runtime: 5\n"), environ={})
