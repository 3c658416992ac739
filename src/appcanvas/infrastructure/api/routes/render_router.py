"""Render API routes.

Evaluates the calculations and conditions of one element for a render.
"""

from fastapi import APIRouter

from appcanvas.core.calculations import EvaluationContext
from appcanvas.domain.entities import ContainerElement, index_elements
from appcanvas.domain.services import OwnerScopedDataSource
from appcanvas.infrastructure.api.dependencies import OwnerId, Records, Renderer
from appcanvas.infrastructure.api.schemas import (
    ElementEvaluation,
    Envelope,
    EvaluateRequest,
    EvaluateResult,
    RowEvaluation,
    serialize_record,
)

router = APIRouter()


@router.post("/evaluate", response_model=Envelope[EvaluateResult])
async def evaluate_element(
    body: EvaluateRequest,
    owner_id: OwnerId,
    records: Records,
    renderer: Renderer,
) -> Envelope[EvaluateResult]:
    """Evaluate one element.

    For a repeating container, its children are also evaluated once per
    bound record.
    """
    element = body.element
    context = EvaluationContext(
        elements=index_elements([element, *body.screen_elements]),
        element_state=body.element_state,
        repeating_rows=body.repeating_rows,
        passed_parameters=body.passed_parameters,
        source_screen_id=body.source_screen_id,
        data_source=OwnerScopedDataSource(records, owner_id),
    )

    result = EvaluateResult(**await renderer.evaluate_element(element, context))

    if isinstance(element, ContainerElement) and element.is_repeating:
        rows = []
        for row_context in await renderer.expand_repeating(element, context):
            children = [
                ElementEvaluation(**await renderer.evaluate_element(child, row_context))
                for child in element.children
            ]
            row = row_context.repeating_rows[element.id]
            rows.append(RowEvaluation(row=serialize_record(row), children=children))
        result.rows = rows

    return Envelope(data=result)
