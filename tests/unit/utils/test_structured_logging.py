"""Unit tests for the structured logging setup."""

import json
import logging

import pytest

from sqlcraft.utils.logging import (
    REDACTED_VALUE,
    bind_context,
    get_logger,
    mask_dsn,
    sanitize_for_logging,
)


@pytest.mark.unit
def test_get_logger_returns_bound_logger() -> None:
    logger = get_logger("test_module")

    assert hasattr(logger, "bind")
    assert hasattr(logger, "info")


@pytest.mark.unit
def test_events_are_rendered_as_json(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("sqlcraft.tests").info("connection_opened", connection_id="main")

    log_data = json.loads(caplog.records[-1].message)
    assert log_data["event"] == "connection_opened"
    assert log_data["connection_id"] == "main"
    assert log_data["logger"] == "sqlcraft.tests"
    assert log_data["level"] == "info"
    assert "timestamp" in log_data


@pytest.mark.unit
def test_rendered_events_are_sanitized(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("sqlcraft.tests").info(
        "connection_opened", dsn="postgresql://app:s3cret@db/app", password="s3cret"
    )

    message = caplog.records[-1].message
    assert "s3cret" not in message
    assert json.loads(message)["dsn"] == "postgresql://[REDACTED]@db/app"


@pytest.mark.unit
def test_bind_context(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    bind_context(connection_id="main").info("statement_executed")

    assert json.loads(caplog.records[-1].message)["connection_id"] == "main"


@pytest.mark.unit
class TestSanitizeForLogging:
    @pytest.mark.parametrize(
        "key", ["password", "db_password", "access_token", "api_key", "client_secret"]
    )
    def test_sensitive_keys(self, key):
        assert sanitize_for_logging({key: "x", "user": "admin"}) == {
            key: REDACTED_VALUE,
            "user": "admin",
        }

    def test_dsn_credentials_masked(self):
        data = {"dsn": "mysql+pymysql://root:pw@localhost/app", "id": "main"}

        assert sanitize_for_logging(data) == {
            "dsn": "mysql+pymysql://[REDACTED]@localhost/app",
            "id": "main",
        }

    def test_database_url_masked(self):
        sanitized = sanitize_for_logging({"database_url": "postgresql://u:p@h/d"})

        assert sanitized["database_url"] == "postgresql://[REDACTED]@h/d"

    def test_nested_dicts(self):
        data = {"connection": {"password": "x", "dsn": "sqlite://"}}

        assert sanitize_for_logging(data) == {
            "connection": {"password": REDACTED_VALUE, "dsn": "sqlite://"}
        }


@pytest.mark.unit
def test_mask_dsn_without_credentials() -> None:
    assert mask_dsn("sqlite:///app.db") == "sqlite:///app.db"
