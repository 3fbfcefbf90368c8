"""ScoreRiskStage: overall risk score, its factors and the derived tier."""

from __future__ import annotations

import re
from typing import Any

from trademind.core.constants import EventSeverity, RiskLevel, StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary

LEVEL_SEVERITY: dict[RiskLevel, EventSeverity] = {
    RiskLevel.LOW: EventSeverity.SUCCESS,
    RiskLevel.MEDIUM: EventSeverity.INFO,
    RiskLevel.HIGH: EventSeverity.WARNING,
    RiskLevel.CRITICAL: EventSeverity.WARNING,
}


def factor_impact(score: float) -> str:
    """Low factor scores have a high impact on risk."""
    if score < 70:
        return "high"
    if score < 85:
        return "medium"
    return "low"


def format_factor_name(name: str) -> str:
    """document_completeness / documentCompleteness -> 'Document Completeness'."""
    words = re.sub(r"([A-Z])", r" \1", name).replace("_", " ").split()
    return " ".join(word.capitalize() for word in words)


class ScoreRiskStage(PipelineStage):
    """Single call to the risk model; logs every factor."""

    stage_type = StageType.RISK
    agent_name = "Risk Scoring Agent"
    task_label = "Calculating risk score"
    start_action = "Analyzing Risk Factors"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return "Evaluating shipment risk"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        run.set_progress(50)
        risk = await run.call(self.functions.risk, run.shipment)

        for name, score in risk.factors.items():
            impact = factor_impact(score)
            run.emit(
                "Risk Factor Analyzed",
                f"{format_factor_name(name)}: {score:.1f}% (Impact: {impact})",
                EventSeverity.WARNING if impact == "high" else EventSeverity.INFO,
                {"factor": name, "score": score, "impact": impact},
            )

        return {"risk_score": risk}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        risk = patch["risk_score"]
        return StageSummary(
            action="Risk Assessment Complete",
            detail=f"Risk Level: {risk.level.upper()} (Score: {risk.overall:.1f}/100)",
            severity=LEVEL_SEVERITY[risk.level],
            data={"risk_level": str(risk.level), "risk_score": risk.overall},
        )
