"""
DocumentIntakeStage: extracts data from every attached document.

Documents are processed one at a time so events stay ordered and
progress only moves forward.  Extraction output is logged and kept in
agent_results; the documents themselves are not modified.
"""

from __future__ import annotations

from typing import Any

from trademind.core.constants import EventSeverity, StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary


class DocumentIntakeStage(PipelineStage):
    """Run intake extraction over each document in order."""

    stage_type = StageType.DOCUMENT_INTAKE
    agent_name = "Document Intake Agent"
    task_label = "Extracting data from documents"
    start_action = "Starting Document Analysis"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return f"Analyzing {len(shipment.documents)} documents"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        documents = run.shipment.documents
        total = len(documents)
        extractions: list[dict[str, Any]] = []

        for index, doc in enumerate(documents):
            run.emit(
                "Processing Document",
                f"Extracting data from {doc.type}: {doc.name}",
                data={"document_type": str(doc.type), "document_name": doc.name},
            )

            extraction = await run.call(self.functions.intake, doc)
            extractions.append({"document_id": doc.id, **extraction.to_dict()})

            run.emit(
                "Data Extracted",
                f"Successfully extracted {extraction.field_count} fields from {doc.name}",
                EventSeverity.SUCCESS,
                {"fields_extracted": extraction.field_count},
            )
            run.set_progress((index + 1) / total * 100)

        return {"agent_results": {str(self.stage_type): extractions}}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        return StageSummary(
            action="Document Intake Complete",
            detail=f"All {len(shipment.documents)} documents processed successfully",
        )
