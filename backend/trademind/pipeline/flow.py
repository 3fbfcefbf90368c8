"""
Flow: the fixed stage order of the shipment pipeline.

STAGE_REGISTRY maps each stage kind to its runner class; STAGE_ORDER is
the only order the orchestrator runs them in.  build_flow() instantiates
the runners against a StageFunctions implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from trademind.core.constants import StageType
from trademind.pipeline.errors import UnknownStageError
from trademind.pipeline.stage import PipelineStage
from trademind.pipeline.stages import (
    CalculateDutyStage,
    CheckComplianceStage,
    ClassifyHSCodeStage,
    DocumentIntakeStage,
    OptimizeRouteStage,
    ScoreRiskStage,
    ValidateDocumentsStage,
)

if TYPE_CHECKING:
    from trademind.agents.base import StageFunctions


STAGE_REGISTRY: dict[StageType, type[PipelineStage]] = {
    StageType.DOCUMENT_INTAKE: DocumentIntakeStage,
    StageType.VALIDATION: ValidateDocumentsStage,
    StageType.HS_CODE: ClassifyHSCodeStage,
    StageType.DUTY: CalculateDutyStage,
    StageType.COMPLIANCE: CheckComplianceStage,
    StageType.RISK: ScoreRiskStage,
    StageType.ROUTE: OptimizeRouteStage,
}

STAGE_ORDER: tuple[StageType, ...] = (
    StageType.DOCUMENT_INTAKE,
    StageType.VALIDATION,
    StageType.HS_CODE,
    StageType.DUTY,
    StageType.COMPLIANCE,
    StageType.RISK,
    StageType.ROUTE,
)


def build_flow(
    functions: StageFunctions,
    order: Sequence[StageType] = STAGE_ORDER,
    registry: dict[StageType, type[PipelineStage]] | None = None,
) -> list[PipelineStage]:
    """
    Return the ordered stage runners.

    Raises:
        UnknownStageError: If `order` names a kind with no runner
            (e.g. the reserved LEARNING kind).
    """
    registry = registry or STAGE_REGISTRY
    stages: list[PipelineStage] = []
    for stage_type in order:
        stage_cls = registry.get(stage_type)
        if stage_cls is None:
            raise UnknownStageError(
                f"No stage runner registered for '{stage_type}'",
                stage=str(stage_type),
            )
        stages.append(stage_cls(functions))
    return stages
