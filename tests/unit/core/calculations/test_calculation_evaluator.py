"""Tests for calculation evaluation."""

from datetime import datetime, timezone

import pytest

from appcanvas.core.calculations import (
    CalculationError,
    CalculationEvaluator,
    EvaluationContext,
    evaluate_calculation,
)
from appcanvas.core.exceptions import ValidationFailedError
from appcanvas.domain.entities import Calculation, QueryAction, parse_element


def calc(*steps: dict) -> Calculation:
    return Calculation.model_validate({"id": "calc1", "steps": list(steps)})


def custom(value, operation=None, step_id="s"):
    step = {"id": step_id, "type": "value", "config": {"source": "custom", "value": value}}
    if operation:
        step["operation"] = operation
    return step


class StubDataSource:
    """Record reads served from a fixed list of rows."""

    def __init__(self, rows: list[dict]):
        self.rows = rows
        self.calls: list[tuple] = []

    async def query(self, database_id, table_id, filters, action, column=None):
        self.calls.append((database_id, table_id, filters, action, column))
        if action is QueryAction.COUNT:
            return {"count": len(self.rows)}
        if action is QueryAction.VALUE:
            if not self.rows or column not in self.rows[0]:
                return {}
            return {column: self.rows[0][column]}
        return [{column: row.get(column)} for row in self.rows]

    async def find_records(self, database_id, table_id, filters):
        return list(self.rows)


class TestSingleStepSources:
    @pytest.mark.asyncio
    async def test_empty_calculation(self):
        assert await evaluate_calculation(calc(), EvaluationContext()) is None

    @pytest.mark.asyncio
    async def test_custom_value(self):
        assert await evaluate_calculation(calc(custom("hello")), EvaluationContext()) == "hello"

    @pytest.mark.asyncio
    async def test_element_static_property(self):
        field = parse_element({"id": "in1", "type": "input", "properties": {"value": "static"}})
        context = EvaluationContext(elements={"in1": field})
        step = {"id": "s", "config": {"source": "element", "elementId": "in1"}}
        assert await evaluate_calculation(calc(step), context) == "static"

    @pytest.mark.asyncio
    async def test_element_state_wins_over_properties(self):
        field = parse_element({"id": "in1", "type": "input", "properties": {"value": "static"}})
        context = EvaluationContext(
            elements={"in1": field}, element_state={"in1": {"value": "typed"}}
        )
        step = {"id": "s", "config": {"source": "element", "elementId": "in1"}}
        assert await evaluate_calculation(calc(step), context) == "typed"

    @pytest.mark.asyncio
    async def test_element_container_value_type(self):
        field = parse_element(
            {"id": "in1", "type": "input", "properties": {"placeholder": "Your name"}}
        )
        context = EvaluationContext(elements={"in1": field})
        step = {
            "id": "s",
            "config": {"source": "element", "elementId": "in1", "containerValueType": "placeholder"},
        }
        assert await evaluate_calculation(calc(step), context) == "Your name"

    @pytest.mark.asyncio
    async def test_unknown_element_is_none(self):
        step = {"id": "s", "config": {"source": "element", "elementId": "ghost"}}
        assert await evaluate_calculation(calc(step), EvaluationContext()) is None

    @pytest.mark.asyncio
    async def test_passed_parameter(self):
        context = EvaluationContext(passed_parameters={"userId": "u-7"}, source_screen_id="home")
        step = {
            "id": "s",
            "config": {
                "source": "passed_parameter",
                "passedParameterName": "userId",
                "passedParameterFromScreen": "home",
            },
        }
        assert await evaluate_calculation(calc(step), context) == "u-7"

    @pytest.mark.asyncio
    async def test_passed_parameter_from_other_screen(self):
        context = EvaluationContext(passed_parameters={"userId": "u-7"}, source_screen_id="settings")
        step = {
            "id": "s",
            "config": {
                "source": "passed_parameter",
                "passedParameterName": "userId",
                "passedParameterFromScreen": "home",
            },
        }
        assert await evaluate_calculation(calc(step), context) is None

    @pytest.mark.asyncio
    async def test_timestamp(self):
        now = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        step = {"id": "s", "config": {"source": "timestamp"}}
        assert await evaluate_calculation(calc(step), EvaluationContext(now=now)) == now


class TestDatabaseSource:
    def db_step(self, **config):
        return {
            "id": "s",
            "config": {"source": "database", "databaseId": "db1", "tableId": "t1", **config},
        }

    @pytest.mark.asyncio
    async def test_count(self):
        source = StubDataSource([{"age": 1.0}, {"age": 2.0}])
        context = EvaluationContext(data_source=source)
        assert await evaluate_calculation(calc(self.db_step(action="count")), context) == 2

    @pytest.mark.asyncio
    async def test_value_of_first_match(self):
        source = StubDataSource([{"age": 1.0}, {"age": 2.0}])
        context = EvaluationContext(data_source=source)
        step = self.db_step(action="value", selectedColumn="age")
        assert await evaluate_calculation(calc(step), context) == 1.0

    @pytest.mark.asyncio
    async def test_value_without_match_is_none(self):
        context = EvaluationContext(data_source=StubDataSource([]))
        step = self.db_step(action="value", selectedColumn="age")
        assert await evaluate_calculation(calc(step), context) is None

    @pytest.mark.asyncio
    async def test_values(self):
        source = StubDataSource([{"age": 1.0}, {"age": 2.0}])
        context = EvaluationContext(data_source=source)
        step = self.db_step(action="values", selectedColumn="age")
        assert await evaluate_calculation(calc(step), context) == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_filters_are_forwarded(self):
        source = StubDataSource([])
        context = EvaluationContext(data_source=source)
        step = self.db_step(
            action="count",
            filters=[{"column": "age", "operator": "greater_than", "value": "18"}],
        )
        await evaluate_calculation(calc(step), context)
        (_, _, filters, action, _), = source.calls
        assert action is QueryAction.COUNT
        assert filters[0].column == "age"
        assert filters[0].value == "18"

    @pytest.mark.asyncio
    async def test_without_data_source(self):
        with pytest.raises(CalculationError):
            await evaluate_calculation(calc(self.db_step(action="count")), EvaluationContext())

    @pytest.mark.asyncio
    async def test_value_requires_column(self):
        context = EvaluationContext(data_source=StubDataSource([]))
        with pytest.raises(CalculationError):
            await evaluate_calculation(calc(self.db_step(action="values")), context)


class TestRepeatingContainerSource:
    STEP = {
        "id": "s",
        "config": {
            "source": "repeating_container",
            "repeatingContainerId": "list1",
            "repeatingColumn": "name",
        },
    }

    @pytest.mark.asyncio
    async def test_unbound_container_is_none(self):
        assert await evaluate_calculation(calc(self.STEP), EvaluationContext()) is None

    @pytest.mark.asyncio
    async def test_each_row_gets_its_own_value(self):
        base = EvaluationContext()
        first = base.bind_row("list1", {"id": "r1", "name": "Ada"})
        second = base.bind_row("list1", {"id": "r2", "name": "Grace"})
        calculation = calc(self.STEP)

        assert await evaluate_calculation(calculation, first) == "Ada"
        assert await evaluate_calculation(calculation, second) == "Grace"
        # Evaluating again against the same row yields the same value
        assert await evaluate_calculation(calculation, first) == "Ada"
        assert await evaluate_calculation(calculation, second) == "Grace"
        assert base.repeating_rows == {}

    def test_contexts_are_immutable(self):
        context = EvaluationContext().bind_row("list1", {"name": "Ada"})
        with pytest.raises(TypeError):
            context.repeating_rows["list1"]["name"] = "Grace"


class TestMultiStepChains:
    @pytest.mark.asyncio
    async def test_arithmetic_fold(self):
        calculation = calc(
            custom(10, step_id="a"),
            custom("5", operation="add", step_id="b"),
            custom(3, operation="multiply", step_id="c"),
            custom(9, operation="subtract", step_id="d"),
            custom(4, operation="divide", step_id="e"),
        )
        assert await evaluate_calculation(calculation, EvaluationContext()) == 9.0

    @pytest.mark.asyncio
    async def test_concat(self):
        calculation = calc(
            custom("Total: ", step_id="a"), custom(12.0, operation="concat", step_id="b")
        )
        assert await evaluate_calculation(calculation, EvaluationContext()) == "Total: 12"

    @pytest.mark.asyncio
    async def test_add_falls_back_to_concat_for_text(self):
        calculation = calc(custom("Hi ", step_id="a"), custom("Ada", operation="add", step_id="b"))
        assert await evaluate_calculation(calculation, EvaluationContext()) == "Hi Ada"

    @pytest.mark.asyncio
    async def test_modulo(self):
        calculation = calc(custom(10, step_id="a"), custom(4, operation="modulo", step_id="b"))
        assert await evaluate_calculation(calculation, EvaluationContext()) == 2.0

    @pytest.mark.asyncio
    async def test_later_step_without_operation(self):
        calculation = calc(custom(1, step_id="a"), custom(2, step_id="b"))
        with pytest.raises(CalculationError):
            await CalculationEvaluator(EvaluationContext()).evaluate(calculation)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["value", "operation"])
    async def test_step_kind_does_not_change_chaining(self, kind):
        second = {**custom(2, operation="add", step_id="b"), "type": kind}
        assert await evaluate_calculation(calc(custom(1, step_id="a"), second), EvaluationContext()) == 3.0

        without_operation = {**custom(2, step_id="b"), "type": kind}
        with pytest.raises(CalculationError):
            await evaluate_calculation(calc(custom(1, step_id="a"), without_operation), EvaluationContext())

    @pytest.mark.asyncio
    async def test_division_by_zero_is_validation_failure(self):
        calculation = calc(custom(1, step_id="a"), custom(0, operation="divide", step_id="b"))
        with pytest.raises(ValidationFailedError):
            await evaluate_calculation(calculation, EvaluationContext())

    @pytest.mark.asyncio
    async def test_unknown_operation(self):
        calculation = calc(custom(1, step_id="a"), custom(2, operation="power", step_id="b"))
        with pytest.raises(CalculationError):
            await evaluate_calculation(calculation, EvaluationContext())
