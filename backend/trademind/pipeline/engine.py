"""
ShipmentOrchestrator: runs the seven stages against one shipment.

Responsibilities:
    - Run every stage strictly in order, one at a time
    - Merge each stage's patch into the working record and publish it
      before the next stage starts
    - Apply the stage-failure policy (abort or continue)
    - Resolve the final disposition and emit the terminal event
    - Keep a per-run trace (RunSummary) for inspection
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from trademind.core.config import settings
from trademind.core.constants import (
    EventSeverity,
    FailurePolicy,
    ShipmentStatus,
    StageRunStatus,
    StageType,
)
from trademind.core.logging import get_logger
from trademind.pipeline.agents import AgentDescriptor, AgentStateTracker
from trademind.pipeline.channels import Channel
from trademind.pipeline.context import ShipmentRecord, StageResult
from trademind.pipeline.disposition import resolve_disposition
from trademind.pipeline.errors import ShipmentStateError, StageExecutionError
from trademind.pipeline.events import EventLogger, ProcessingEvent
from trademind.pipeline.flow import build_flow
from trademind.pipeline.stage import PipelineStage

if TYPE_CHECKING:
    from trademind.agents.base import StageFunctions

SYSTEM_AGENT = "System"

FINAL_SEVERITY: dict[ShipmentStatus, EventSeverity] = {
    ShipmentStatus.CLEARED: EventSeverity.SUCCESS,
    ShipmentStatus.REJECTED: EventSeverity.ERROR,
}


@dataclass
class RunSummary:
    """Trace of one process_shipment() call."""

    shipment_id: str
    status: str                     # ShipmentStatus value, or "aborted"
    started_at: datetime | None = None
    completed_at: datetime | None = None
    total_duration_ms: int = 0
    stages_completed: int = 0
    total_stages: int = 0
    stage_results: list[dict[str, Any]] = field(default_factory=list)
    failed_stages: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "shipment_id": self.shipment_id,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "total_duration_ms": self.total_duration_ms,
            "stages_completed": self.stages_completed,
            "total_stages": self.total_stages,
            "stage_results": self.stage_results,
            "failed_stages": self.failed_stages,
            "error": self.error,
        }


class ShipmentOrchestrator:
    """
    Drives a shipment through the pipeline.

    Each orchestrator owns its own AgentStateTracker unless one is passed
    in, so concurrent runs on separate orchestrators never share agent
    state.

    Usage::

        orchestrator = ShipmentOrchestrator(
            SimulatedStageFunctions(),
            on_agent_update=print_agents,
            on_shipment_update=store_patch,
            on_event=append_to_feed,
        )
        final = await orchestrator.process_shipment(shipment)
    """

    def __init__(
        self,
        stage_functions: StageFunctions,
        *,
        tracker: AgentStateTracker | None = None,
        event_logger: EventLogger | None = None,
        on_agent_update: Callable[[list[AgentDescriptor]], None] | None = None,
        on_shipment_update: Callable[[dict[str, Any]], None] | None = None,
        on_event: Callable[[ProcessingEvent], None] | None = None,
        failure_policy: FailurePolicy | str | None = None,
        stages: list[PipelineStage] | None = None,
    ) -> None:
        self.stage_functions = stage_functions
        self.tracker = tracker or AgentStateTracker()
        self.events = event_logger or EventLogger()
        self.shipment_updates: Channel[dict[str, Any]] = Channel("shipment")

        self.tracker.channel.subscribe(on_agent_update)
        self.shipment_updates.subscribe(on_shipment_update)
        self.events.channel.subscribe(on_event)

        self.failure_policy = FailurePolicy(
            failure_policy or settings.STAGE_FAILURE_POLICY
        )
        self.stages = stages if stages is not None else build_flow(stage_functions)
        self.last_run: RunSummary | None = None
        self.logger = get_logger("pipeline.engine")

    async def process_shipment(self, shipment: ShipmentRecord) -> ShipmentRecord:
        """
        Run every stage and return the fully merged record.

        The caller's record is not modified; the run works on a copy.

        Raises:
            ShipmentStateError: The shipment is already cleared/rejected.
            StageExecutionError: A stage function failed under the abort
                policy.  `partial_record` holds what was merged so far.
        """
        if shipment.is_terminal:
            raise ShipmentStateError(
                f"Shipment {shipment.id} is already {shipment.status}",
                shipment_id=shipment.id,
            )

        started_at = datetime.now(timezone.utc)
        record = copy.deepcopy(shipment)
        record.status = ShipmentStatus.PROCESSING

        log = self.logger.bind(
            shipment_id=record.id,
            reference_number=record.reference_number,
            total_stages=len(self.stages),
        )
        log.info(
            "Shipment processing started",
            documents=len(record.documents),
            failure_policy=str(self.failure_policy),
        )

        self._emit_system(
            record,
            StageType.DOCUMENT_INTAKE,
            "Processing Started",
            f"Initiated processing for shipment {record.id}",
        )

        stage_results: list[StageResult] = []
        failed_stages: list[str] = []

        for index, stage in enumerate(self.stages):
            stage_log = log.bind(stage=str(stage.stage_type), stage_index=index + 1)

            try:
                outcome = await stage.run(record, self.tracker, self.events)
            except StageExecutionError as exc:
                stage_results.append(self._failed_result(stage, exc))

                if self.failure_policy == FailurePolicy.ABORT:
                    stage_log.error("Stage failed, aborting run", error=str(exc))
                    self._emit_system(
                        record,
                        stage.stage_type,
                        "Processing Aborted",
                        f"Shipment {record.id} processing aborted at {stage.agent_name}",
                        EventSeverity.ERROR,
                        {"failed_stage": str(stage.stage_type)},
                    )
                    self.last_run = self._summarize(
                        record, "aborted", started_at, stage_results, [str(stage.stage_type)],
                        error=str(exc),
                    )
                    exc.partial_record = record
                    raise

                stage_log.warning("Stage failed, continuing with next stage", error=str(exc))
                failed_stages.append(str(stage.stage_type))
                continue

            record.apply_patch(outcome.patch)
            self._publish(outcome.patch)
            stage_results.append(outcome.result)
            stage_log.info("Stage completed", duration_ms=outcome.result.duration_ms)

        # ── Finalise ──────────────────────────────────
        final_status = resolve_disposition(record)
        if failed_stages and final_status != ShipmentStatus.REJECTED:
            final_status = ShipmentStatus.PENDING_REVIEW

        final_patch = {"status": final_status, "updated_at": datetime.now(timezone.utc)}
        record.apply_patch(final_patch)
        self._publish(final_patch)

        # No stage owns the terminal event; it carries the last stage's tag.
        self._emit_system(
            record,
            StageType.ROUTE,
            "Processing Completed",
            f"Shipment {record.id} processing completed with status: {final_status}",
            FINAL_SEVERITY.get(final_status, EventSeverity.WARNING),
            {"final_status": str(final_status)},
        )

        self.last_run = self._summarize(
            record, str(final_status), started_at, stage_results, failed_stages,
        )
        log.info(
            "Shipment processing finished",
            status=str(final_status),
            stages_completed=self.last_run.stages_completed,
            failed_stages=failed_stages,
            duration_ms=self.last_run.total_duration_ms,
        )
        return record

    # ─── Internals ────────────────────────────────────

    def _publish(self, patch: dict[str, Any]) -> None:
        """Observers get their own copy so they never share state with the run."""
        self.shipment_updates.publish(copy.deepcopy(patch))

    def _emit_system(
        self,
        record: ShipmentRecord,
        stage_type: StageType,
        action: str,
        detail: str,
        severity: EventSeverity = EventSeverity.INFO,
        data: dict[str, Any] | None = None,
    ) -> None:
        self.events.emit(record.id, stage_type, SYSTEM_AGENT, action, detail, severity, data)

    @staticmethod
    def _failed_result(stage: PipelineStage, exc: StageExecutionError) -> StageResult:
        now = datetime.now(timezone.utc)
        started = exc.details.get("started_at")
        return StageResult(
            stage=str(stage.stage_type),
            status=StageRunStatus.FAILED,
            started_at=datetime.fromisoformat(started) if started else now,
            completed_at=now,
            error=str(exc),
        )

    def _summarize(
        self,
        record: ShipmentRecord,
        status: str,
        started_at: datetime,
        stage_results: list[StageResult],
        failed_stages: list[str],
        error: str | None = None,
    ) -> RunSummary:
        completed_at = datetime.now(timezone.utc)
        return RunSummary(
            shipment_id=record.id,
            status=status,
            started_at=started_at,
            completed_at=completed_at,
            total_duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            stages_completed=sum(1 for r in stage_results if r.succeeded),
            total_stages=len(self.stages),
            stage_results=[r.to_dict() for r in stage_results],
            failed_stages=failed_stages,
            error=error,
        )
