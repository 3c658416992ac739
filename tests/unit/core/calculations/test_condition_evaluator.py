"""Tests for condition evaluation."""

import pytest

from appcanvas.core.calculations import CalculationError, EvaluationContext, evaluate_condition
from appcanvas.domain.entities import Condition


def condition(*values, operator=None, properties=None, step_operation=None) -> Condition:
    steps = []
    for index, value in enumerate(values):
        step = {"id": f"s{index}", "config": {"source": "custom", "value": value}}
        if index == 1 and step_operation:
            step["operation"] = step_operation
        steps.append(step)
    data = {"id": "cond1", "steps": steps, "properties": properties or {}}
    if operator:
        data["operator"] = operator
    return Condition.model_validate(data)


class TestComparisons:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "left, operator, right, expected",
        [
            ("a", "equals", "a", True),
            ("a", "not_equals", "b", True),
            (5, "greater_than", 3, True),
            ("10", "greater_than", 9, True),
            ("10", "less_than", "9", False),
            (3, "greater_equal", 3.0, True),
            (3, "less_equal", 2, False),
            ("Hello World", "contains", "world", True),
            (["a", "b"], "contains", "b", True),
            ("abc", "greater_than", 1, False),
            (True, "equals", "true", True),
        ],
    )
    async def test_binary_operators(self, left, operator, right, expected):
        result = await evaluate_condition(condition(left, right, operator=operator), EvaluationContext())
        assert result is expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "value, operator, expected",
        [
            ("", "is_empty", True),
            ("  ", "is_empty", True),
            (None, "is_empty", True),
            ([], "is_empty", True),
            ("x", "is_not_empty", True),
            (0, "is_not_empty", True),
        ],
    )
    async def test_unary_operators(self, value, operator, expected):
        result = await evaluate_condition(condition(value, operator=operator), EvaluationContext())
        assert result is expected

    @pytest.mark.asyncio
    async def test_unknown_operator(self):
        with pytest.raises(CalculationError):
            await evaluate_condition(condition(1, 2, operator="between"), EvaluationContext())


class TestLogical:
    @pytest.mark.asyncio
    async def test_and(self):
        assert await evaluate_condition(condition(True, "yes", operator="and"), EvaluationContext())
        assert not await evaluate_condition(condition(True, 0, operator="and"), EvaluationContext())

    @pytest.mark.asyncio
    async def test_or(self):
        assert await evaluate_condition(condition("", 1, operator="or"), EvaluationContext())
        assert not await evaluate_condition(condition("false", None, operator="or"), EvaluationContext())

    @pytest.mark.asyncio
    async def test_and_short_circuits(self):
        """The right operand is never resolved when the left decides."""
        cond = Condition.model_validate(
            {
                "id": "c",
                "operator": "and",
                "steps": [
                    {"id": "l", "config": {"source": "custom", "value": False}},
                    {"id": "r", "config": {"source": "database", "databaseId": "d", "tableId": "t"}},
                ],
            }
        )
        assert await evaluate_condition(cond, EvaluationContext()) is False


class TestOperatorResolution:
    @pytest.mark.asyncio
    async def test_from_properties(self):
        cond = condition(5, 3, properties={"operator": "greater_than"})
        assert await evaluate_condition(cond, EvaluationContext())

    @pytest.mark.asyncio
    async def test_from_second_step_operation(self):
        cond = condition(5, 3, step_operation="less_than")
        assert not await evaluate_condition(cond, EvaluationContext())

    @pytest.mark.asyncio
    async def test_condition_operator_wins(self):
        cond = condition(5, 3, operator="equals", properties={"operator": "greater_than"})
        assert not await evaluate_condition(cond, EvaluationContext())

    @pytest.mark.asyncio
    async def test_single_step_truthiness(self):
        assert await evaluate_condition(condition("on"), EvaluationContext())
        assert not await evaluate_condition(condition("0"), EvaluationContext())

    @pytest.mark.asyncio
    async def test_no_steps_is_false(self):
        assert not await evaluate_condition(condition(), EvaluationContext())

    @pytest.mark.asyncio
    async def test_repeating_row_condition(self):
        cond = Condition.model_validate(
            {
                "id": "c",
                "operator": "equals",
                "steps": [
                    {
                        "id": "l",
                        "config": {
                            "source": "repeating_container",
                            "repeatingContainerId": "list",
                            "repeatingColumn": "status",
                        },
                    },
                    {"id": "r", "config": {"source": "custom", "value": "open"}},
                ],
            }
        )
        base = EvaluationContext()
        assert await evaluate_condition(cond, base.bind_row("list", {"status": "open"}))
        assert not await evaluate_condition(cond, base.bind_row("list", {"status": "closed"}))
