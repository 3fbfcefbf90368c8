"""The seven stage runners, in pipeline order."""

from trademind.pipeline.stages.document_intake import DocumentIntakeStage
from trademind.pipeline.stages.validate_documents import ValidateDocumentsStage
from trademind.pipeline.stages.classify_hs_code import ClassifyHSCodeStage
from trademind.pipeline.stages.calculate_duty import CalculateDutyStage
from trademind.pipeline.stages.check_compliance import CheckComplianceStage
from trademind.pipeline.stages.score_risk import ScoreRiskStage
from trademind.pipeline.stages.optimize_route import OptimizeRouteStage

__all__ = [
    "DocumentIntakeStage",
    "ValidateDocumentsStage",
    "ClassifyHSCodeStage",
    "CalculateDutyStage",
    "CheckComplianceStage",
    "ScoreRiskStage",
    "OptimizeRouteStage",
]
