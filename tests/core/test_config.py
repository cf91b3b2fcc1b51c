"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from chill_radio.core.config import (
    Config,
    DatabaseConfig,
    RadioConfig,
    create_default_config,
    load_config,
)
from chill_radio.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> None:
    """Keep config lookups and .env loading away from the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("CHILL_RADIO_DATABASE", raising=False)


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    return path


class TestRadioConfig:
    def test_defaults_are_valid(self) -> None:
        config = RadioConfig()
        config.validate()
        assert config.playlist_length == 10
        assert config.polling_interval_ms == 1000
        assert config.min_shuffle_timeout_ms == 3_600_000

    @pytest.mark.parametrize(
        "overrides",
        [
            {"playlist_length": 0},
            {"playlist_length": -3},
            {"playlist_length": "10"},
            {"playlist_length": True},
            {"polling_interval_ms": -1},
            {"polling_interval_ms": 1.5},
            {"min_shuffle_timeout_ms": -1},
            {"min_shuffle_timeout_ms": None},
        ],
    )
    def test_invalid_values_are_rejected(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            RadioConfig(**overrides).validate()

    def test_zero_interval_and_rest_period_are_allowed(self) -> None:
        RadioConfig(polling_interval_ms=0, min_shuffle_timeout_ms=0).validate()


class TestLoadConfig:
    def test_missing_explicit_file_gives_defaults(self, tmp_path) -> None:
        path = tmp_path / "absent.toml"

        config = load_config(path)

        assert config == Config()
        assert not path.exists()

    def test_parses_sections(self, tmp_path) -> None:
        path = write_config(
            tmp_path,
            """
[radio]
playlist_length = 4
polling_interval_ms = 250

[database]
path = "/tmp/radio.db"

[logging]
level = "DEBUG"
console_output = false
""",
        )

        config = load_config(path)

        assert config.radio == RadioConfig(
            playlist_length=4, polling_interval_ms=250, min_shuffle_timeout_ms=3_600_000
        )
        assert config.database.path == "/tmp/radio.db"
        assert config.logging.level == "DEBUG"
        assert config.logging.console_output is False
        assert config.logging.backup_count == 5

    def test_default_template_parses_to_defaults(self, tmp_path) -> None:
        path = write_config(tmp_path, create_default_config())

        assert load_config(path) == Config()

    def test_values_are_not_validated_on_load(self, tmp_path) -> None:
        path = write_config(tmp_path, "[radio]\nplaylist_length = 0\n")

        config = load_config(path)

        with pytest.raises(ConfigurationError):
            config.radio.validate()

    def test_malformed_toml_is_a_configuration_error(self, tmp_path) -> None:
        path = write_config(tmp_path, "[radio\nplaylist_length = ")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_environment_overrides_database_path(self, tmp_path, monkeypatch) -> None:
        path = write_config(tmp_path, '[database]\npath = "/tmp/from-file.db"\n')
        monkeypatch.setenv("CHILL_RADIO_DATABASE", "/tmp/from-env.db")

        config = load_config(path)

        assert config.database.path == "/tmp/from-env.db"


class TestDatabaseConfig:
    def test_default_path_is_in_data_dir(self, tmp_path) -> None:
        assert DatabaseConfig().resolve_path() == tmp_path / "data" / "chill-radio" / "chill-radio.db"

    def test_explicit_path(self, tmp_path) -> None:
        assert DatabaseConfig(path=str(tmp_path / "x.db")).resolve_path() == tmp_path / "x.db"
