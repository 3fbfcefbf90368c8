"""
Domain-specific exception hierarchy for the shipment orchestrator.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (shipment ID, stage, etc.) for logging/debugging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trademind.pipeline.context import ShipmentRecord


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        shipment_id: str | None = None,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.shipment_id = shipment_id
        self.stage = stage
        self.details = details or {}
        super().__init__(message)


class StageExecutionError(PipelineError):
    """
    A stage function failed.

    `partial_record` is filled in by the orchestrator when the failure
    aborts a run, so callers can inspect what had been merged so far.
    """

    def __init__(
        self,
        message: str,
        *,
        partial_record: ShipmentRecord | None = None,
        **kwargs,
    ) -> None:
        self.partial_record = partial_record
        super().__init__(message, **kwargs)


class ShipmentStateError(PipelineError):
    """A write was attempted on a shipment in a terminal status."""
    pass


class UnknownStageError(PipelineError):
    """A flow referenced a stage kind with no registered runner."""
    pass
