"""
ValidateDocumentsStage: checks each document and records the verdict.

Verdicts are written onto copies of the documents; the copies replace
the record's documents through the patch once every document has been
checked.  A failure partway leaves the record's documents untouched.
An invalid document is a normal result, not a failure.
"""

from __future__ import annotations

import copy
from typing import Any

from trademind.core.constants import EventSeverity, StageType, ValidationStatus
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary


class ValidateDocumentsStage(PipelineStage):
    """Validate every document for completeness and accuracy."""

    stage_type = StageType.VALIDATION
    agent_name = "Validation Agent"
    task_label = "Validating document completeness"
    start_action = "Starting Validation"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return "Checking document completeness and accuracy"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        documents = [copy.deepcopy(doc) for doc in run.shipment.documents]
        total = len(documents)

        for index, doc in enumerate(documents):
            run.emit(
                "Validating Document",
                f"Checking {doc.type} for completeness and accuracy",
            )

            validation = await run.call(self.functions.validate, doc)
            doc.apply_validation(validation)

            if validation.valid:
                run.emit(
                    "Validation Passed",
                    f"{doc.name} passed all validation checks",
                    EventSeverity.SUCCESS,
                )
            else:
                run.emit(
                    "Validation Issues Found",
                    f"{doc.name} has {len(validation.errors)} validation errors",
                    EventSeverity.WARNING,
                    {"errors": list(validation.errors)},
                )
            run.set_progress((index + 1) / total * 100)

        valid = sum(1 for d in documents if d.validation_status == ValidationStatus.VALID)
        return {
            "documents": documents,
            "agent_results": {
                str(self.stage_type): {"valid": valid, "total": total},
            },
        }

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        tally = patch["agent_results"][str(self.stage_type)]
        all_valid = tally["valid"] == tally["total"]
        return StageSummary(
            action="Validation Complete",
            detail=f"{tally['valid']}/{tally['total']} documents validated successfully",
            severity=EventSeverity.SUCCESS if all_valid else EventSeverity.WARNING,
        )
