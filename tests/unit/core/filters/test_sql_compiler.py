"""Tests for SQL lowering of filter predicates."""

import pytest

from appcanvas.core.filters import (
    And,
    Comparison,
    FilterCompilationError,
    MatchAll,
    compile_to_sql,
)


class TestSQLCompilerBasics:
    def test_match_all(self):
        sql, params = compile_to_sql(MatchAll())
        assert sql == "1=1"
        assert params == {}

    def test_empty_and(self):
        sql, _ = compile_to_sql(And(()))
        assert sql == "1=1"

    def test_column_name_is_bound_as_json_path(self):
        sql, params = compile_to_sql(Comparison("first name", "equals", "Ada"))
        assert sql == 'json_extract("data", :param_0) = :param_1'
        assert params == {"param_0": '$."first name"', "param_1": "Ada"}

    def test_quotes_in_column_are_escaped(self):
        _, params = compile_to_sql(Comparison('say "hi"', "equals", "x"))
        assert params["param_0"] == '$."say \\"hi\\""'


class TestSQLCompilerOperators:
    @pytest.mark.parametrize(
        "operator, sql_op",
        [
            ("equals", "="),
            ("greater_than", ">"),
            ("less_than", "<"),
            ("greater_equal", ">="),
            ("less_equal", "<="),
        ],
    )
    def test_comparison_operators(self, operator, sql_op):
        sql, params = compile_to_sql(Comparison("age", operator, 18.0))
        assert sql == f'json_extract("data", :param_0) {sql_op} :param_1'
        assert params["param_1"] == 18.0

    def test_not_equals_matches_absent_fields(self):
        sql, params = compile_to_sql(Comparison("status", "not_equals", "done"))
        assert sql == (
            '(json_extract("data", :param_0) IS NULL'
            ' OR json_extract("data", :param_0) != :param_1)'
        )
        assert params == {"param_0": '$."status"', "param_1": "done"}

    def test_contains_is_case_insensitive_and_escaped(self):
        sql, params = compile_to_sql(Comparison("name", "contains", "50%_Off"))
        assert sql.startswith('LOWER(CAST(json_extract("data", :param_0) AS TEXT)) LIKE :param_1')
        assert sql.endswith("ESCAPE '\\'")
        assert params["param_1"] == "%50\\%\\_off%"

    def test_null_equality(self):
        sql, _ = compile_to_sql(Comparison("name", "equals", None))
        assert sql.endswith("IS NULL")
        sql, _ = compile_to_sql(Comparison("name", "not_equals", None))
        assert sql.endswith("IS NOT NULL")

    def test_and_joins_with_unique_params(self):
        sql, params = compile_to_sql(
            And((Comparison("age", "greater_than", 18.0), Comparison("age", "less_than", 65.0)))
        )
        assert sql == (
            '(json_extract("data", :param_0) > :param_1 AND '
            'json_extract("data", :param_2) < :param_3)'
        )
        assert params["param_1"] == 18.0
        assert params["param_3"] == 65.0

    def test_unknown_operator_raises(self):
        with pytest.raises(FilterCompilationError):
            compile_to_sql(Comparison("age", "between", 1))

    def test_custom_data_column(self):
        sql, _ = compile_to_sql(Comparison("a", "equals", 1), data_column="doc")
        assert sql.startswith('json_extract("doc",')
