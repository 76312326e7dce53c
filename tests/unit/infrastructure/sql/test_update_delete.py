"""Tests for the UPDATE and DELETE builders."""

import pytest

from sqlcraft.infrastructure.sql import Delete, Update, WhereClause


@pytest.mark.unit
class TestUpdate:
    def test_set_and_where(self):
        query = Update().table("t").set("a", ":a").set("b", "b + 1").where("id = :id")

        assert query.render() == "UPDATE t SET a = :a, b = b + 1 WHERE id = :id"

    def test_later_set_wins(self):
        query = Update().table("t").set("a", 1).set("a", 2)

        assert query.render() == "UPDATE t SET a = 2"

    def test_alternative(self):
        query = Update().or_fail().table("t").set("a", 1)

        assert query.render() == "UPDATE OR FAIL t SET a = 1"

    def test_enclosing(self):
        query = Update().table("t").set("a", 1).or_where("x = 1")
        query.enable_enclose_identifier()

        assert query.render() == 'UPDATE "t" SET "a" = 1 WHERE x = 1'


@pytest.mark.unit
class TestDelete:
    def test_without_where(self):
        assert Delete().from_("t").render() == "DELETE FROM t"

    def test_nested_where(self):
        query = Delete().from_("t").where("a = 1").or_where(
            WhereClause().where("b = 2").where("c = 3")
        )

        assert str(query) == "DELETE FROM t WHERE a = 1 OR (b = 2 AND c = 3)"
