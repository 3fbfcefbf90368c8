"""
CheckComplianceStage: evaluates the regulatory rules.

One event per finding, then a summary.  The summary is a success only
when every finding passed; a single warning is enough to make it an
error, even though the per-finding event for that warning is only a
warning.  Disposition, not this summary, decides the outcome.
"""

from __future__ import annotations

from typing import Any

from trademind.core.constants import ComplianceOutcome, EventSeverity, StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary

FINDING_SEVERITY: dict[ComplianceOutcome, EventSeverity] = {
    ComplianceOutcome.PASSED: EventSeverity.SUCCESS,
    ComplianceOutcome.FAILED: EventSeverity.ERROR,
    ComplianceOutcome.WARNING: EventSeverity.WARNING,
}


class CheckComplianceStage(PipelineStage):
    """Single call producing the full list of rule outcomes."""

    stage_type = StageType.COMPLIANCE
    agent_name = "Compliance Agent"
    task_label = "Checking regulatory compliance"
    start_action = "Starting Compliance Checks"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return "Checking regulatory requirements and restrictions"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        run.set_progress(50)
        findings = await run.call(self.functions.compliance, run.shipment)

        for finding in findings:
            run.emit(
                f"{finding.rule} Check",
                f"{finding.message}: {finding.status}",
                FINDING_SEVERITY[finding.status],
                {"rule": finding.rule, "status": str(finding.status)},
            )

        return {"compliance_checks": list(findings)}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        findings = patch["compliance_checks"]
        passed = sum(1 for f in findings if f.status == ComplianceOutcome.PASSED)
        return StageSummary(
            action="Compliance Checks Complete",
            detail=f"{passed}/{len(findings)} compliance checks passed",
            severity=(
                EventSeverity.SUCCESS if passed == len(findings) else EventSeverity.ERROR
            ),
            data={"passed": passed, "total": len(findings)},
        )
