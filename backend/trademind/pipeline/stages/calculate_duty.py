"""
CalculateDutyStage: duties and taxes for the classified goods.

Uses the classification from the previous stage; an empty code is sent
when classification is absent (only possible under the continue policy).
"""

from __future__ import annotations

from typing import Any

from trademind.core.constants import StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary


class CalculateDutyStage(PipelineStage):
    """Single call to the duty calculator."""

    stage_type = StageType.DUTY
    agent_name = "Duty Calculator Agent"
    task_label = "Calculating duties and taxes"
    start_action = "Calculating Duties"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return (
            f"Computing duties for {shipment.exporter.country} → "
            f"{shipment.importer.country}"
        )

    async def execute(self, run: StageRun) -> dict[str, Any]:
        shipment = run.shipment
        run.set_progress(50)
        duty = await run.call(
            self.functions.duty,
            shipment.hs_code.code if shipment.hs_code else "",
            shipment.goods.value,
            shipment.exporter.country,
            shipment.importer.country,
        )
        return {"duty_calculation": duty}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        duty = patch["duty_calculation"]
        return StageSummary(
            action="Duty Calculation Complete",
            detail=(
                f"Total duties: ${duty.total_amount:.2f} "
                f"(Duty: ${duty.duty_amount:.2f}, Tax: ${duty.tax_amount:.2f})"
            ),
            data={"total_amount": duty.total_amount, "currency": duty.currency},
        )
