"""Evaluator for calculations and conditions."""

from typing import Any

from appcanvas.core.logging import get_logger
from appcanvas.domain.entities import Calculation, Condition, QueryAction, Step, StepSource

from .context import EvaluationContext
from .exceptions import CalculationError
from .operators import UNARY_OPERATORS, apply_arithmetic, compare, is_truthy

logger = get_logger(__name__)

DEFAULT_ELEMENT_PROPERTY = "value"


class CalculationEvaluator:
    """Evaluates calculation and condition documents against a context.

    Evaluation only reads: the same document evaluated twice against the
    same context yields the same result.
    """

    def __init__(self, context: EvaluationContext):
        self.context = context

    async def evaluate(self, calculation: Calculation) -> Any:
        """Evaluate a calculation to a single value.

        The first step seeds the result. Each later step must name an
        ``operation`` and is applied as ``result = operation(result, step value)``.

        Raises:
            CalculationError: If a later step has no operation or the operation fails.
        """
        if not calculation.steps:
            return None

        first, *rest = calculation.steps
        result = await self.resolve_step(first)

        for step in rest:
            if not step.operation:
                raise CalculationError(
                    f"Step '{step.id}' of calculation '{calculation.id}' has no operation"
                )
            operand = await self.resolve_step(step)
            result = apply_arithmetic(step.operation, result, operand)

        return result

    async def evaluate_condition(self, condition: Condition) -> bool:
        """Evaluate a condition to a boolean.

        The first step is the left operand and the second the right operand.
        Without an operator the condition holds when its first operand is truthy.
        """
        if not condition.steps:
            return False

        operator = condition.resolve_operator()
        left = await self.resolve_step(condition.steps[0])

        if operator is None:
            return is_truthy(left)

        if operator in UNARY_OPERATORS:
            return compare(operator, left, None)

        # Short-circuit logic for AND/OR
        if operator == "and" and not is_truthy(left):
            return False
        if operator == "or" and is_truthy(left):
            return True

        right = await self.resolve_step(condition.steps[1]) if len(condition.steps) > 1 else None
        return compare(operator, left, right)

    async def resolve_step(self, step: Step) -> Any:
        """Resolve the value a single step refers to."""
        config = step.config
        source = config.source

        if source is StepSource.CUSTOM:
            return config.value

        if source is StepSource.ELEMENT:
            return self._resolve_element(step)

        if source is StepSource.DATABASE:
            return await self._resolve_database(step)

        if source is StepSource.REPEATING_CONTAINER:
            return self._resolve_repeating(step)

        if source is StepSource.PASSED_PARAMETER:
            return self._resolve_passed_parameter(step)

        if source is StepSource.TIMESTAMP:
            return self.context.now

        raise CalculationError(f"Unknown step source: {source}")

    def _resolve_element(self, step: Step) -> Any:
        config = step.config
        element_id = config.element_id
        if not element_id:
            return None

        property_name = config.container_value_type or DEFAULT_ELEMENT_PROPERTY

        state = self.context.element_state.get(element_id)
        if state is not None and property_name in state:
            return state[property_name]

        element = self.context.elements.get(element_id)
        if element is None:
            logger.debug("Referenced element not found", element_id=element_id, step_id=step.id)
            return None

        return element.get_property(property_name)

    async def _resolve_database(self, step: Step) -> Any:
        config = step.config
        data_source = self.context.data_source
        if data_source is None:
            raise CalculationError(f"Step '{step.id}' reads a database but no data source is bound")

        if not config.database_id or not config.table_id:
            raise CalculationError(f"Step '{step.id}' must name a database and a table")

        action = config.action or QueryAction.VALUE
        column = config.selected_column
        if action is not QueryAction.COUNT and not column:
            raise CalculationError(f"Step '{step.id}' must select a column for '{action.value}'")

        filters = [item.to_filter() for item in config.filters]
        result = await data_source.query(
            config.database_id, config.table_id, filters, action, column
        )

        if action is QueryAction.COUNT:
            return result["count"]
        if action is QueryAction.VALUE:
            return result.get(column)
        return [row.get(column) for row in result]

    def _resolve_repeating(self, step: Step) -> Any:
        config = step.config
        row = self.context.repeating_rows.get(config.repeating_container_id or "")
        if row is None:
            logger.debug(
                "Repeating container has no bound row",
                container_id=config.repeating_container_id,
                step_id=step.id,
            )
            return None
        return row.get(config.repeating_column or "")

    def _resolve_passed_parameter(self, step: Step) -> Any:
        config = step.config
        if not config.passed_parameter_name:
            return None

        expected_screen = config.passed_parameter_from_screen
        source_screen = self.context.source_screen_id
        if expected_screen and source_screen and str(expected_screen) != str(source_screen):
            return None

        return self.context.passed_parameters.get(config.passed_parameter_name)


async def evaluate_calculation(calculation: Calculation, context: EvaluationContext) -> Any:
    """Evaluate a calculation against a context."""
    return await CalculationEvaluator(context).evaluate(calculation)


async def evaluate_condition(condition: Condition, context: EvaluationContext) -> bool:
    """Evaluate a condition against a context."""
    return await CalculationEvaluator(context).evaluate_condition(condition)
