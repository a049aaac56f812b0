# tests/test_config.py
"""Tests for settings loading."""

from pathlib import Path

import pytest

from filetoken.config import Settings, load_settings


class TestSettings:
    """Tests for load_settings()."""

    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings.host == "127.0.0.1"
        assert settings.port == 8545
        assert settings.require_auth is False
        assert settings.hash_algorithm == "sha3_256"
        assert settings.data_dir == Path("~/.filetoken").expanduser()

    def test_yaml_file(self, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text(
            f"data_dir: {temp_dir / 'data'}\n"
            "port: 9000\n"
            "require_auth: true\n"
        )

        settings = load_settings(config, environ={})

        assert settings.port == 9000
        assert settings.require_auth is True
        assert settings.registry_dir == temp_dir / "data" / "registry"
        assert settings.accounts_dir == temp_dir / "data" / "accounts"

    def test_environment_overrides_file(self, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text("port: 9000\n")

        settings = load_settings(config, environ={
            "FILETOKEN_PORT": "9100",
            "FILETOKEN_REQUIRE_AUTH": "yes",
            "FILETOKEN_LOG_LEVEL": "debug",
        })

        assert settings.port == 9100
        assert settings.require_auth is True
        assert settings.log_level == "DEBUG"

    def test_explicit_overrides_win(self):
        settings = load_settings(environ={"FILETOKEN_PORT": "9100"}, port=9200, host=None)

        assert settings.port == 9200
        assert settings.host == "127.0.0.1"

    def test_unknown_key(self, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text("colour: blue\n")

        with pytest.raises(ValueError):
            load_settings(config, environ={})

    def test_empty_file(self, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text("")

        assert load_settings(config, environ={}) == Settings()

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_settings(temp_dir / "missing.yaml", environ={})

    def test_invalid_boolean(self):
        with pytest.raises(ValueError):
            load_settings(environ={"FILETOKEN_REQUIRE_AUTH": "maybe"})

    def test_unsupported_hash_algorithm(self):
        with pytest.raises(ValueError):
            Settings(hash_algorithm="md5")
