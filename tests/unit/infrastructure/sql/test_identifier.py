"""Tests for identifier enclosing and dialect presets."""

import pytest

from sqlcraft.infrastructure.sql import (
    BuilderUsageError,
    Dialect,
    IdentifierEnclosure,
    Insert,
    Select,
    get_dialect,
    quote_identifier,
)
from sqlcraft.infrastructure.sql.dialects import DIALECTS, MSSQL, MYSQL


@pytest.mark.unit
class TestQuoteIdentifier:
    def test_postgresql_default(self):
        assert quote_identifier("company_id") == '"company_id"'

    def test_escapes_embedded_quote(self):
        assert quote_identifier('we"ird') == '"we""ird"'

    def test_mysql_backticks(self):
        assert quote_identifier("ta`ble", dialect="mysql") == "`ta``ble`"

    def test_mssql_brackets(self):
        assert quote_identifier("order]x", dialect="mssql") == "[order]]x]"


@pytest.mark.unit
class TestIdentifierEnclosure:
    def test_disabled_by_default(self):
        enclosure = IdentifierEnclosure()

        assert enclosure.enclose("a") == "a"
        assert enclosure.enclose(["a", "b"]) == ["a", "b"]

    def test_enable_returns_previous_state(self):
        enclosure = IdentifierEnclosure()

        assert enclosure.enable_enclose_identifier() is False
        assert enclosure.enable_enclose_identifier(False) is True

    def test_encloses_bare_identifiers_only(self):
        enclosure = IdentifierEnclosure().set_enclose_symbol("[", "]")
        enclosure.enable_enclose_identifier()

        assert enclosure.enclose(["a", "count(b)", "c AS d"]) == [
            "[a]",
            "count(b)",
            "c AS d",
        ]

    def test_closing_symbol_defaults_to_opening(self):
        enclosure = IdentifierEnclosure().set_enclose_symbol("`")
        enclosure.enable_enclose_identifier()

        assert enclosure.enclose("a") == "`a`"

    def test_same_select_with_and_without_enclosing(self):
        query = Select("a", "max(b)").from_("t").order_by("a")
        assert query.render() == "SELECT a, max(b) FROM t ORDER BY a"

        query.enable_enclose_identifier()
        assert query.render() == 'SELECT "a", max(b) FROM "t" ORDER BY "a"'

    def test_symbols_are_per_builder(self):
        first = Select("a").set_enclose_symbol("[", "]")
        second = Select("a")
        first.enable_enclose_identifier()
        second.enable_enclose_identifier()

        assert first.render() == "SELECT [a]"
        assert second.render() == 'SELECT "a"'


@pytest.mark.unit
class TestDialects:
    def test_known_dialects(self):
        assert sorted(DIALECTS) == ["mssql", "mysql", "postgresql", "sqlite"]

    def test_get_dialect_is_case_insensitive(self):
        assert get_dialect("MySQL") is MYSQL

    def test_unknown_dialect(self):
        with pytest.raises(KeyError, match="Known dialects"):
            get_dialect("oracle")

    def test_apply_enables_enclosing(self):
        insert = MSSQL.apply(Insert()).into("t").on("a").values(1)

        assert insert.render() == "INSERT INTO [t] ([a]) VALUES (1)"

    def test_quote_uses_dialect_escaping(self):
        assert Dialect("mysql", "`", "`").quote("a`b") == "`a``b`"


@pytest.mark.unit
def test_builder_usage_error_message():
    error = BuilderUsageError("Cannot join if there is no FROM set", operation="join")

    assert error.operation == "join"
    assert str(error) == "Cannot join if there is no FROM set (operation='join')"
