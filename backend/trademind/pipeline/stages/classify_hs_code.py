"""ClassifyHSCodeStage: assigns an HS code to the goods description."""

from __future__ import annotations

from typing import Any

from trademind.core.constants import StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary


class ClassifyHSCodeStage(PipelineStage):
    """Single call to the classifier; no iteration."""

    stage_type = StageType.HS_CODE
    agent_name = "HS Code Agent"
    task_label = "Classifying goods with AI"
    start_action = "Starting Classification"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return f"Classifying: {shipment.goods.description}"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        run.set_progress(50)
        hs_code = await run.call(self.functions.classify, run.shipment.goods.description)
        return {"hs_code": hs_code}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        hs_code = patch["hs_code"]
        return StageSummary(
            action="Classification Complete",
            detail=(
                f"Classified as {hs_code.code} - {hs_code.description} "
                f"({hs_code.confidence}% confidence)"
            ),
            data={"hs_code": hs_code.code, "confidence": hs_code.confidence},
        )
