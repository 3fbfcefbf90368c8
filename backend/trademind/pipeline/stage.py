"""
PipelineStage: abstract base class for the stage runners.

Every stage in the shipment pipeline inherits from this class.  The base
run() owns the agent lifecycle (idle → processing → completed/error),
progress milestones, timing, metrics and the start/complete events.
Subclasses only implement the business logic in execute() and describe
their result in summarize().
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

from trademind.core.constants import (
    AgentStatus,
    EventSeverity,
    StageRunStatus,
    StageType,
)
from trademind.core.logging import get_logger
from trademind.pipeline.context import ShipmentRecord, StageResult
from trademind.pipeline.errors import StageExecutionError

if TYPE_CHECKING:
    from trademind.agents.base import StageFunctions
    from trademind.pipeline.agents import AgentStateTracker
    from trademind.pipeline.events import EventLogger

logger = get_logger(__name__)

R = TypeVar("R")


@dataclass
class StageSummary:
    """The completion event a stage emits once it has succeeded."""

    action: str
    detail: str
    severity: EventSeverity = EventSeverity.SUCCESS
    data: dict[str, Any] | None = None


@dataclass
class StageOutcome:
    """What run() hands back to the orchestrator."""

    patch: dict[str, Any]
    result: StageResult


class StageRun:
    """
    Per-run helpers handed to execute(): event emission, progress
    updates and guarded calls into the stage functions.
    """

    def __init__(
        self,
        stage: PipelineStage,
        shipment: ShipmentRecord,
        tracker: AgentStateTracker,
        events: EventLogger,
    ) -> None:
        self.stage = stage
        self.shipment = shipment
        self.tracker = tracker
        self.events = events

    def emit(
        self,
        action: str,
        detail: str,
        severity: EventSeverity = EventSeverity.INFO,
        data: dict[str, Any] | None = None,
    ) -> None:
        self.events.emit(
            self.shipment.id,
            self.stage.stage_type,
            self.stage.agent_name,
            action,
            detail,
            severity,
            data,
        )

    def set_progress(self, progress: float) -> None:
        self.tracker.set_agent_state(self.stage.stage_type, progress=progress)

    async def call(self, func: Callable[..., Awaitable[R]], *args: Any) -> R:
        """
        Await a stage function.  Anything it raises becomes a
        StageExecutionError; observer errors raised elsewhere in
        execute() are left alone.
        """
        try:
            return await func(*args)
        except Exception as exc:
            raise StageExecutionError(
                f"{self.stage.agent_name} failed: {exc}",
                shipment_id=self.shipment.id,
                stage=str(self.stage.stage_type),
            ) from exc


class PipelineStage(ABC):
    """
    Base class for every stage runner.

    Subclasses MUST set:
        - stage_type (StageType) : which agent this stage drives
        - agent_name (str)       : display name used in events
        - task_label (str)       : current-task text while processing
        - start_action (str)     : action label of the starting event

    and implement:
        - start_detail(shipment) : detail text of the starting event
        - execute(run)           : call the stage function, return a patch
        - summarize(shipment, patch): the completion event
    """

    stage_type: StageType
    agent_name: str = "Unnamed Agent"
    task_label: str = "Processing"
    start_action: str = "Starting"

    def __init__(self, functions: StageFunctions) -> None:
        self.functions = functions

    @abstractmethod
    def start_detail(self, shipment: ShipmentRecord) -> str:
        ...

    @abstractmethod
    async def execute(self, run: StageRun) -> dict[str, Any]:
        """
        Run the stage's logic and return the patch to merge into the
        shipment.  Must not write stage outputs onto the shipment.
        """
        ...

    @abstractmethod
    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        ...

    async def run(
        self,
        shipment: ShipmentRecord,
        tracker: AgentStateTracker,
        events: EventLogger,
    ) -> StageOutcome:
        """
        Execute the stage with agent transitions and events around it.

        Raises:
            StageExecutionError: The stage function failed.  The agent is
                left in the error state and an error event is emitted first.
        """
        run = StageRun(self, shipment, tracker, events)
        log = logger.bind(shipment_id=shipment.id, stage=str(self.stage_type))

        run.emit(self.start_action, self.start_detail(shipment))
        tracker.set_agent_state(
            self.stage_type,
            status=AgentStatus.PROCESSING,
            progress=0,
            current_task=self.task_label,
        )

        started_at = self._now()
        started = time.monotonic()

        try:
            patch = await self.execute(run)
        except StageExecutionError as exc:
            elapsed = time.monotonic() - started
            tracker.set_agent_state(self.stage_type, status=AgentStatus.ERROR)
            tracker.record_run(self.stage_type, elapsed, succeeded=False)
            run.emit(
                "Stage Failed",
                str(exc),
                EventSeverity.ERROR,
                {"error": str(exc.__cause__ or exc)},
            )
            log.error("Stage failed", error=str(exc), duration_ms=int(elapsed * 1000))
            exc.details.setdefault("started_at", started_at.isoformat())
            raise

        elapsed = time.monotonic() - started
        tracker.set_agent_state(
            self.stage_type,
            status=AgentStatus.COMPLETED,
            progress=100,
            last_run=self._now(),
        )
        tracker.record_run(self.stage_type, elapsed, succeeded=True)

        summary = self.summarize(shipment, patch)
        run.emit(summary.action, summary.detail, summary.severity, summary.data)

        result = StageResult(
            stage=str(self.stage_type),
            status=StageRunStatus.COMPLETED,
            started_at=started_at,
            completed_at=self._now(),
            duration_ms=int(elapsed * 1000),
        )
        log.debug("Stage completed", duration_ms=result.duration_ms)
        return StageOutcome(patch=patch, result=result)

    # ─── Helpers available to all stages ──────────────

    def _now(self) -> datetime:
        """UTC-aware now."""
        return datetime.now(timezone.utc)
