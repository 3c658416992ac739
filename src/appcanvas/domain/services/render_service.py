"""Render-time resolution of element documents.

Expands repeating containers into per-row contexts, picks conditional
branches and evaluates the calculations of an element.
"""

from typing import Any

from appcanvas.core.calculations import (
    CalculationError,
    CalculationEvaluator,
    EvaluationContext,
    find_calculation_ids,
    substitute,
)
from appcanvas.core.logging import get_logger
from appcanvas.domain.entities import BaseElement, ContainerElement

logger = get_logger(__name__)

TEXT_PROPERTIES = ("value", "text")


class RenderService:
    """Resolves what an element shows for a given context."""

    async def expand_repeating(
        self, container: ContainerElement, context: EvaluationContext
    ) -> list[EvaluationContext]:
        """One context per record bound to a repeating container.

        Each context binds its own row under the container id. A container
        that is not repeating yields the context unchanged.

        Raises:
            CalculationError: If records are needed but no data source is bound.
        """
        if not container.is_repeating:
            return [context]

        if context.data_source is None:
            raise CalculationError(
                f"Repeating container '{container.id}' needs a data source"
            )

        config = container.repeating_config
        filters = [item.to_filter() for item in config.filters]
        rows = await context.data_source.find_records(config.database_id, config.table_id, filters)
        logger.debug("Repeating container expanded", container_id=container.id, rows=len(rows))
        return [context.bind_row(container.id, row) for row in rows]

    async def select_branch(self, element: BaseElement, context: EvaluationContext) -> int | None:
        """Index of the branch an element renders.

        Fixed elements always render branch 0. Conditional elements render
        the branch of their first condition that holds, or nothing.
        """
        if element.render_type != "conditional":
            return 0

        evaluator = CalculationEvaluator(context.for_element(element))
        for index, condition in enumerate(element.conditions):
            if await evaluator.evaluate_condition(condition):
                return index
        return None

    async def is_visible(self, element: BaseElement, context: EvaluationContext) -> bool:
        return await self.select_branch(element, context) is not None

    async def render_text(
        self, text: str, element: BaseElement, context: EvaluationContext
    ) -> str:
        """Replace the calculation tokens of a text with evaluated values."""
        evaluator = CalculationEvaluator(context.for_element(element))
        values: dict[str, Any] = {}
        for calculation_id in find_calculation_ids(text):
            calculation = element.calculations.get(calculation_id)
            if calculation is not None:
                values[calculation_id] = await evaluator.evaluate(calculation)
        return substitute(text, values)

    async def evaluate_element(
        self, element: BaseElement, context: EvaluationContext
    ) -> dict[str, Any]:
        """Evaluate everything dynamic about one element.

        Returns:
            A dict with calculation values by id, condition results by id,
            the selected branch, visibility and the rendered text (when the
            element has a text property).
        """
        evaluator = CalculationEvaluator(context.for_element(element))

        calculations = {
            calculation_id: await evaluator.evaluate(calculation)
            for calculation_id, calculation in element.calculations.items()
        }
        conditions = {
            condition.id: await evaluator.evaluate_condition(condition)
            for condition in element.conditions
        }
        branch = await self.select_branch(element, context)

        text = None
        for name in TEXT_PROPERTIES:
            raw = element.get_property(name)
            if isinstance(raw, str):
                text = substitute(raw, calculations)
                break

        return {
            "element_id": element.id,
            "calculations": calculations,
            "conditions": conditions,
            "branch": branch,
            "visible": branch is not None,
            "text": text,
        }
