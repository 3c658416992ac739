"""SQL compiler for filter predicates.

Lowers a predicate tree to a parameterized SQL WHERE fragment over the
JSON ``data`` column of a record container.
"""

from typing import Any

from .ast import And, Comparison, MatchAll, Predicate
from .exceptions import FilterCompilationError


class SQLCompiler:
    """Compiles predicate trees to SQLite WHERE clauses.

    Field access goes through ``json_extract`` with the JSON path bound as a
    parameter, so column names never reach the SQL text.
    """

    OPERATOR_MAP = {
        "equals": "=",
        "not_equals": "!=",
        "greater_than": ">",
        "less_than": "<",
        "greater_equal": ">=",
        "less_equal": "<=",
    }

    def __init__(self, data_column: str = "data"):
        self.data_column = data_column
        self.param_counter = 0
        self.params: dict[str, Any] = {}

    def compile(self, predicate: Predicate) -> tuple[str, dict[str, Any]]:
        """Compile a predicate to SQL.

        Args:
            predicate: Predicate tree to compile.

        Returns:
            Tuple of (SQL fragment, parameter bindings)

        Raises:
            FilterCompilationError: If the tree contains an unknown node or operator.
        """
        self.param_counter = 0
        self.params = {}

        sql = self._compile_node(predicate)
        return sql, self.params

    def _compile_node(self, node: Predicate) -> str:
        if isinstance(node, MatchAll):
            return "1=1"

        if isinstance(node, Comparison):
            return self._compile_comparison(node)

        if isinstance(node, And):
            if not node.operands:
                return "1=1"
            parts = [self._compile_node(operand) for operand in node.operands]
            return "(" + " AND ".join(parts) + ")"

        raise FilterCompilationError(f"Unknown predicate node: {type(node).__name__}")

    def _bind(self, value: Any) -> str:
        param_name = f"param_{self.param_counter}"
        self.param_counter += 1
        self.params[param_name] = value
        return f":{param_name}"

    def _field(self, column: str) -> str:
        path = '$."' + column.replace('"', '\\"') + '"'
        return f'json_extract("{self.data_column}", {self._bind(path)})'

    def _compile_comparison(self, node: Comparison) -> str:
        field = self._field(node.column)

        if node.operator == "contains":
            pattern = "%" + _escape_like(str(node.value).lower()) + "%"
            return f"LOWER(CAST({field} AS TEXT)) LIKE {self._bind(pattern)} ESCAPE '\\'"

        sql_op = self.OPERATOR_MAP.get(node.operator)
        if not sql_op:
            raise FilterCompilationError(f"Unknown operator: {node.operator}")

        if node.value is None:
            if node.operator == "equals":
                return f"{field} IS NULL"
            if node.operator == "not_equals":
                return f"{field} IS NOT NULL"

        value = self._bind(node.value)

        # Absent fields count as "not equal" to any value
        if node.operator == "not_equals":
            return f"({field} IS NULL OR {field} != {value})"

        return f"{field} {sql_op} {value}"


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_to_sql(predicate: Predicate, data_column: str = "data") -> tuple[str, dict[str, Any]]:
    """Compile a predicate to a SQL WHERE fragment.

    Examples:
        >>> compile_to_sql(MatchAll())
        ('1=1', {})

        >>> compile_to_sql(Comparison("age", "greater_than", 18.0))
        ('json_extract("data", :param_0) > :param_1', {'param_0': '$."age"', 'param_1': 18.0})
    """
    return SQLCompiler(data_column).compile(predicate)
