"""Tests for the SELECT builder."""

import pytest

from sqlcraft.infrastructure.sql import BuilderUsageError, Join, Select, WhereClause


@pytest.mark.unit
class TestSelectRendering:
    def test_full_query(self):
        query = Select("a", "b").from_("t").where("a = 1").order_by("a").limit(10)

        assert query.render() == "SELECT a, b FROM t WHERE a = 1 ORDER BY a LIMIT 10"

    def test_star_without_columns(self):
        assert Select().from_("t").render() == "SELECT * FROM t"

    def test_render_is_repeatable(self):
        query = Select("a").from_("t").where("a = 1")

        assert query.render() == query.render() == str(query)

    def test_distinct_and_all(self):
        assert Select("a").distinct().from_("t").render() == "SELECT DISTINCT a FROM t"
        assert Select("a").all().from_("t").render() == "SELECT ALL a FROM t"

    def test_select_adds_columns(self):
        assert Select("a").select("b", "c").from_("t").render() == "SELECT a, b, c FROM t"

    def test_several_sources_and_alias(self):
        query = Select().from_("a").as_("x").from_("b")

        assert query.render() == "SELECT * FROM a AS x, b"

    def test_alias_without_source_is_ignored(self):
        assert Select().as_("x").render() == "SELECT *"

    def test_sub_select_source(self):
        sub = Select("id").from_("t")
        query = Select().from_(sub).as_("s")

        assert query.render() == "SELECT * FROM (SELECT id FROM t) AS s"

    def test_group_by_and_having(self):
        query = (
            Select("a", "count(*)").from_("t").group_by("a").having("count(*) > 1")
        )

        assert query.render() == (
            "SELECT a, count(*) FROM t GROUP BY a HAVING count(*) > 1"
        )

    def test_having_without_group_by_is_not_rendered(self):
        assert Select().from_("t").having("x > 1").render() == "SELECT * FROM t"

    def test_limit_with_offset(self):
        query = Select().from_("t").limit(10).offset(20)

        assert query.render() == "SELECT * FROM t LIMIT 10 OFFSET 20"

    def test_several_limits_without_offset(self):
        assert Select().from_("t").limit(5, 10).render() == "SELECT * FROM t LIMIT 5, 10"

    def test_offset_without_limit_is_not_rendered(self):
        assert Select().from_("t").offset(3).render() == "SELECT * FROM t"


@pytest.mark.unit
class TestSelectComposition:
    def test_union(self):
        query = Select().from_("a").union().select().from_("b")

        assert query.render() == "SELECT * FROM a UNION SELECT * FROM b"

    def test_each_operator(self):
        for method, keyword in [
            ("union_all", "UNION ALL"),
            ("intersect", "INTERSECT"),
            ("except_", "EXCEPT"),
        ]:
            query = getattr(Select("x").from_("a"), method)().select("x").from_("b")
            assert query.render() == f"SELECT x FROM a {keyword} SELECT x FROM b"

    def test_branch_state_does_not_leak(self):
        query = Select("a").distinct().from_("t").where("a = 1").union().from_("u")

        assert query.render() == "SELECT DISTINCT a FROM t WHERE a = 1 UNION SELECT * FROM u"

    def test_order_and_limit_apply_to_whole_statement(self):
        query = Select().from_("a").order_by("x").limit(5).union().from_("b")

        assert query.render() == "SELECT * FROM a UNION SELECT * FROM b ORDER BY x LIMIT 5"


@pytest.mark.unit
class TestSelectJoin:
    def test_join_mutates_last_source(self):
        query = Select().from_("x")
        query.join("y")

        assert query.render() == "SELECT * FROM x JOIN y"

    def test_join_without_from_fails(self):
        with pytest.raises(BuilderUsageError, match="no FROM set") as exc_info:
            Select().left_join("y")

        assert exc_info.value.operation == "left_join"

    def test_join_returns_proxy(self):
        assert isinstance(Select().from_("x").join("y"), Join)

    def test_on(self):
        query = Select().from_("a").inner_join("b").on("a.id = b.a_id").where("b.x = 1")

        assert query.render() == (
            "SELECT * FROM a INNER JOIN b ON a.id = b.a_id WHERE b.x = 1"
        )

    def test_on_with_clause(self):
        condition = WhereClause().where("a.id = b.a_id").or_where("b.a_id IS NULL")
        query = Select().from_("a").left_join("b").on(condition)

        assert query.render() == (
            "SELECT * FROM a LEFT JOIN b ON (a.id = b.a_id OR b.a_id IS NULL)"
        )

    def test_using(self):
        query = Select().from_("a").natural_join("b").using("id", "k")

        assert query.render() == "SELECT * FROM a NATURAL JOIN b USING (id, k)"

    def test_using_encloses_columns(self):
        query = Select()
        query.enable_enclose_identifier()
        query.from_("a").natural_join("b").using("id", "k")

        assert query.render() == (
            'SELECT * FROM "a" NATURAL JOIN "b" USING ("id", "k")'
        )

    def test_proxy_forwards_other_methods(self):
        query = Select().from_("a").cross_join("b").where("a.x = b.x")

        assert isinstance(query, Select)
        assert query.render() == "SELECT * FROM a CROSS JOIN b WHERE a.x = b.x"

    def test_join_chain(self):
        query = (
            Select()
            .from_("a")
            .left_outer_join("b")
            .on("a.id = b.id")
            .natural_left_outer_join("c")
        )

        assert query.render() == (
            "SELECT * FROM a LEFT OUTER JOIN b ON a.id = b.id NATURAL LEFT OUTER JOIN c"
        )

    def test_join_keywords(self):
        for method, keyword in [
            ("natural_left_join", "NATURAL LEFT JOIN"),
            ("natural_inner_join", "NATURAL INNER JOIN"),
            ("natural_cross_join", "NATURAL CROSS JOIN"),
        ]:
            query = Select().from_("a")
            getattr(query, method)("b")
            assert query.render() == f"SELECT * FROM a {keyword} b"

    def test_join_sub_select(self):
        query = Select().from_("a")
        query.join(Select("id").from_("b"))

        assert query.render() == "SELECT * FROM a JOIN (SELECT id FROM b)"

    def test_join_with_enclosing(self):
        query = Select()
        query.enable_enclose_identifier()
        query.from_("a").join("b")

        # The join chain holds a space, so it is not enclosed again
        assert query.render() == 'SELECT * FROM "a" JOIN "b"'
