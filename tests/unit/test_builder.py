import pytest

from sparrowsql import Sparrow, SQLBuilderError
from sparrowsql.core import StatementBuilder


def test_select_all(sparrow: Sparrow) -> None:
    assert sparrow.select().sql() == "SELECT * FROM user"


def test_where_equals(sparrow: Sparrow) -> None:
    assert sparrow.where("id", 123).select().sql() == "SELECT * FROM user WHERE id=123"


def test_chained_where_joins_with_and(sparrow: Sparrow) -> None:
    result = sparrow.where("id", 123).where("name", "bob").select().sql()
    assert result == "SELECT * FROM user WHERE id=123 AND name='bob'"


def test_where_mapping(sparrow: Sparrow) -> None:
    result = sparrow.where({"id": 123, "name": "bob"}).select().sql()
    assert result == "SELECT * FROM user WHERE id=123 AND name='bob'"


def test_where_raw_fragment(sparrow: Sparrow) -> None:
    assert sparrow.where("id = 99").select().sql() == "SELECT * FROM user WHERE id = 99"


def test_where_raw_fragments_get_join_words(sparrow: Sparrow) -> None:
    result = sparrow.where("id > 1").where("points < 50").where("|name = 'bob'").select().sql()
    assert result == "SELECT * FROM user WHERE id > 1 AND points < 50 OR name = 'bob'"


def test_where_custom_operator(sparrow: Sparrow) -> None:
    assert sparrow.where("id >", 123).select().sql() == "SELECT * FROM user WHERE id>123"


def test_where_or(sparrow: Sparrow) -> None:
    result = sparrow.where("id <", 10).where("|id >", 20).select().sql()
    assert result == "SELECT * FROM user WHERE id<10 OR id>20"


@pytest.mark.parametrize(
    ("field", "value", "expected"),
    [
        ("name %", "%bob%", "SELECT * FROM user WHERE name LIKE '%bob%'"),
        ("name !%", "%bob%", "SELECT * FROM user WHERE name NOT LIKE '%bob%'"),
        ("id @", [10, 20, 30], "SELECT * FROM user WHERE id IN (10,20,30)"),
        ("id !@", [10, 20, 30], "SELECT * FROM user WHERE id NOT IN (10,20,30)"),
    ],
)
def test_where_operator_aliases(sparrow: Sparrow, field: str, value: object, expected: str) -> None:
    assert sparrow.where(field, value).select().sql() == expected


def test_sequence_value_forces_in(sparrow: Sparrow) -> None:
    assert sparrow.where("id", (1, 2)).select().sql() == "SELECT * FROM user WHERE id IN (1,2)"


def test_where_null(sparrow: Sparrow) -> None:
    result = sparrow.where("email", None).where("name !=", None).select().sql()
    assert result == "SELECT * FROM user WHERE email IS NULL AND name IS NOT NULL"


def test_select_fields(sparrow: Sparrow) -> None:
    assert sparrow.select(["id", "name"]).sql() == "SELECT id,name FROM user"


def test_limit_offset(sparrow: Sparrow) -> None:
    assert sparrow.limit(10).offset(20).select().sql() == "SELECT * FROM user LIMIT 10 OFFSET 20"


def test_select_with_limit_and_offset(sparrow: Sparrow) -> None:
    assert sparrow.select("*", 50, 10).sql() == "SELECT * FROM user LIMIT 50 OFFSET 10"


def test_limit_coerces_to_int(sparrow: Sparrow) -> None:
    assert sparrow.limit("5").select().sql() == "SELECT * FROM user LIMIT 5"  # type: ignore[arg-type]


def test_distinct(sparrow: Sparrow) -> None:
    assert sparrow.distinct().select("name").sql() == "SELECT DISTINCT name FROM user"


def test_join(sparrow: Sparrow) -> None:
    result = sparrow.join("role", {"role.id": "user.role_id"}).select().sql()
    assert result == "SELECT * FROM user INNER JOIN role ON role.id=user.role_id"


def test_join_with_multiple_conditions(sparrow: Sparrow) -> None:
    result = sparrow.join("role", {"role.id": "user.role_id", "role.id >": 10}).select().sql()
    assert result == "SELECT * FROM user INNER JOIN role ON role.id=user.role_id AND role.id>10"


def test_outer_joins(sparrow: Sparrow) -> None:
    result = sparrow.left_join("role", {"role.id": "user.role_id"}).full_join("team", {"team.id": "user.team_id"})
    assert result.select().sql() == (
        "SELECT * FROM user LEFT OUTER JOIN role ON role.id=user.role_id FULL OUTER JOIN team ON team.id=user.team_id"
    )


def test_invalid_join_type(sparrow: Sparrow) -> None:
    with pytest.raises(SQLBuilderError, match="Invalid join type"):
        sparrow.join("role", {"role.id": "user.role_id"}, "CROSS")


def test_sort_desc(sparrow: Sparrow) -> None:
    assert sparrow.sort_desc("id").select().sql() == "SELECT * FROM user ORDER BY id DESC"


def test_sort_asc_multiple(sparrow: Sparrow) -> None:
    assert sparrow.sort_asc(["rank", "name"]).select().sql() == "SELECT * FROM user ORDER BY rank ASC, name ASC"


def test_order_by_appends(sparrow: Sparrow) -> None:
    result = sparrow.sort_asc("rank").sort_desc("id").select().sql()
    assert result == "SELECT * FROM user ORDER BY rank ASC, id DESC"


def test_invalid_direction(sparrow: Sparrow) -> None:
    with pytest.raises(SQLBuilderError, match="Invalid direction"):
        sparrow.order_by("id", "SIDEWAYS")


def test_group_by(sparrow: Sparrow) -> None:
    result = sparrow.group_by("points").select(["id", "count(*)"]).sql()
    assert result == "SELECT id,count(*) FROM user GROUP BY points"


def test_group_by_appends(sparrow: Sparrow) -> None:
    assert sparrow.group_by("points").group_by("name").select().sql() == "SELECT * FROM user GROUP BY points, name"


def test_having(sparrow: Sparrow) -> None:
    result = sparrow.group_by("points").having("count(*) >", 1).select(["points", "count(*)"]).sql()
    assert result == "SELECT points,count(*) FROM user GROUP BY points HAVING count(*)>1"


def test_between(sparrow: Sparrow) -> None:
    assert sparrow.between("points", 10, 20).select().sql() == "SELECT * FROM user WHERE points BETWEEN 10 AND 20"


def test_clause_order(sparrow: Sparrow) -> None:
    result = (
        sparrow.join("role", {"role.id": "user.role_id"})
        .where("id >", 1)
        .group_by("role.name")
        .having("count(*) >", 2)
        .sort_desc("role.name")
        .limit(5, 10)
        .select(["role.name", "count(*)"])
        .sql()
    )
    assert result == (
        "SELECT role.name,count(*) FROM user INNER JOIN role ON role.id=user.role_id WHERE id>1 "
        "GROUP BY role.name HAVING count(*)>2 ORDER BY role.name DESC LIMIT 5 OFFSET 10"
    )


def test_insert(sparrow: Sparrow) -> None:
    result = sparrow.insert({"id": 123, "name": "bob"}).sql()
    assert result == "INSERT INTO user (id,name) VALUES (123,'bob')"


def test_insert_empty_mapping_keeps_sql(sparrow: Sparrow) -> None:
    sparrow.sql("SELECT 1")
    assert sparrow.insert({}).sql() == "SELECT 1"


def test_update(sparrow: Sparrow) -> None:
    result = sparrow.where({"id": 123}).update({"name": "bob", "email": "bob@aol.com"}).sql()
    assert result == "UPDATE user SET name='bob',email='bob@aol.com' WHERE id=123"


def test_update_with_raw_expressions(sparrow: Sparrow) -> None:
    assert sparrow.where("id", 1).update({0: "points=points+1"}).sql() == "UPDATE user SET points=points+1 WHERE id=1"
    assert sparrow.update("points=0").sql() == "UPDATE user SET points=0 WHERE id=1"


def test_delete(sparrow: Sparrow) -> None:
    assert sparrow.where("id", 123).delete().sql() == "DELETE FROM user WHERE id=123"


def test_delete_with_conditions(sparrow: Sparrow) -> None:
    assert sparrow.delete({"id": 5}).sql() == "DELETE FROM user WHERE id=5"


@pytest.mark.parametrize("operation", ["select", "delete"])
def test_table_required(operation: str) -> None:
    builder = StatementBuilder()
    with pytest.raises(SQLBuilderError, match="Table is not defined"):
        getattr(builder, operation)()


def test_table_required_for_writes() -> None:
    with pytest.raises(SQLBuilderError, match="Table is not defined"):
        StatementBuilder().insert({"id": 1})
    with pytest.raises(SQLBuilderError, match="Table is not defined"):
        StatementBuilder().update({"id": 1})


def test_invalid_where_condition(sparrow: Sparrow) -> None:
    with pytest.raises(SQLBuilderError, match="Invalid where condition"):
        sparrow.where(42)


def test_reset_keeps_table(sparrow: Sparrow) -> None:
    sparrow.where("id", 1).sort_desc("id").limit(3).select()
    sparrow.reset()
    assert sparrow.table == "user"
    assert sparrow.sql() == ""
    assert sparrow.select().sql() == "SELECT * FROM user"


def test_from_resets_clauses(sparrow: Sparrow) -> None:
    sparrow.where("id", 1)
    assert sparrow.from_("role").select().sql() == "SELECT * FROM role"


def test_from_without_reset_keeps_clauses(sparrow: Sparrow) -> None:
    sparrow.where("id", 1)
    assert sparrow.from_("role", reset=False).select().sql() == "SELECT * FROM role WHERE id=1"


def test_sql_setter_strips(sparrow: Sparrow) -> None:
    assert sparrow.sql("  SELECT 1  ").sql() == "SELECT 1"


def test_state_is_replaced_not_mutated(sparrow: Sparrow) -> None:
    before = sparrow.state
    sparrow.where("id", 1)
    assert before.where == ""
    assert sparrow.state.where == "WHERE id=1"


def test_reset_is_idempotent(sparrow: Sparrow) -> None:
    sparrow.where("id", 1).select()
    once = sparrow.reset().state
    assert sparrow.reset().state == once


def test_where_quotes_embedded_quote(sparrow: Sparrow) -> None:
    assert sparrow.where("name", "O'Dell").select().sql() == "SELECT * FROM user WHERE name='O\\'Dell'"
