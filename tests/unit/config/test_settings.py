"""Unit tests for Settings loading."""

from pathlib import Path

import pytest

from sqlcraft.config import ConnectionSettings, Settings, SettingsError, get_settings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.connections == {}
        assert settings.autoload is None
        assert settings.dialect is None

    def test_log_level_aliases(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "DEBUG"

        monkeypatch.setenv("SQLCRAFT_LOG_LEVEL", "WARNING")
        assert Settings().log_level == "WARNING"

    def test_nested_connection_from_env(self, monkeypatch):
        monkeypatch.setenv("SQLCRAFT_CONNECTIONS__MAIN__DSN", "sqlite:///app.db")
        monkeypatch.setenv("SQLCRAFT_AUTOLOAD", "main")

        settings = Settings()

        assert settings.connections["main"].dsn == "sqlite:///app.db"
        assert settings.autoload == "main"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestConnectionsFile:
    def _write(self, tmp_path: Path, text: str) -> str:
        path = tmp_path / "connections.yml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_loads_file(self, tmp_path):
        path = self._write(
            tmp_path,
            "autoload: main\n"
            "connections:\n"
            "  main:\n"
            "    dsn: sqlite://\n"
            "    options:\n"
            "      echo: false\n",
        )

        settings = Settings(connections_file=path)

        assert settings.autoload == "main"
        assert settings.connections["main"] == ConnectionSettings(
            dsn="sqlite://", options={"echo": False}
        )

    def test_explicit_connections_win(self, tmp_path):
        path = self._write(
            tmp_path,
            "connections:\n"
            "  main:\n"
            "    dsn: sqlite:///from_file.db\n"
            "  other:\n"
            "    dsn: sqlite://\n",
        )

        settings = Settings(
            connections_file=path,
            connections={"main": {"dsn": "sqlite:///explicit.db"}},
            autoload="other",
        )

        assert settings.connections["main"].dsn == "sqlite:///explicit.db"
        assert settings.connections["other"].dsn == "sqlite://"
        assert settings.autoload == "other"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SettingsError, match="not found"):
            Settings(connections_file=str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = self._write(tmp_path, "connections: [unclosed\n")

        with pytest.raises(SettingsError, match="Invalid YAML"):
            Settings(connections_file=path)

    def test_not_a_mapping(self, tmp_path):
        path = self._write(tmp_path, "- a\n- b\n")

        with pytest.raises(SettingsError, match="must be a mapping"):
            Settings(connections_file=path)

    def test_entry_without_dsn(self, tmp_path):
        path = self._write(tmp_path, "connections:\n  main:\n    username: app\n")

        with pytest.raises(SettingsError, match="Invalid connection list"):
            Settings(connections_file=path)
