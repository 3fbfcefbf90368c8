"""
ShipmentStore: shipments, the capped event log and the agent snapshot.

attach() wires an orchestrator's three channels into the store, so a
run's patches, events and agent updates land here as they happen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from trademind.core.constants import (
    TERMINAL_STATUSES,
    ComplianceOutcome,
    RiskLevel,
    ShipmentStatus,
)
from trademind.core.logging import get_logger
from trademind.pipeline.agents import AgentDescriptor, default_agents
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.events import DEFAULT_RETENTION_LIMIT, EventStore, ProcessingEvent

if TYPE_CHECKING:
    from trademind.pipeline.engine import ShipmentOrchestrator

logger = get_logger(__name__)

ACTIVE_STATUSES = frozenset({ShipmentStatus.PROCESSING, ShipmentStatus.VALIDATED})


@dataclass
class DashboardStats:
    """Aggregate figures across every stored shipment."""

    total_shipments: int = 0
    active_shipments: int = 0
    cleared_shipments: int = 0
    avg_processing_time: float = 0.0       # seconds, finished shipments only
    total_duties_paid: float = 0.0
    compliance_rate: float = 0.0           # percent of findings passed
    risk_distribution: dict[str, int] = field(
        default_factory=lambda: {str(level): 0 for level in RiskLevel}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_shipments": self.total_shipments,
            "active_shipments": self.active_shipments,
            "cleared_shipments": self.cleared_shipments,
            "avg_processing_time": self.avg_processing_time,
            "total_duties_paid": self.total_duties_paid,
            "compliance_rate": self.compliance_rate,
            "risk_distribution": dict(self.risk_distribution),
        }


class ShipmentStore:
    """In-memory shipment repository, newest shipment first."""

    def __init__(self, event_limit: int = DEFAULT_RETENTION_LIMIT) -> None:
        self._shipments: dict[str, ShipmentRecord] = {}
        self.events = EventStore(limit=event_limit)
        self.agents: list[AgentDescriptor] = default_agents()

    # ─── Shipments ────────────────────────────────────

    def add_shipment(self, shipment: ShipmentRecord) -> ShipmentRecord:
        # Re-inserting moves the shipment to the front.
        self._shipments.pop(shipment.id, None)
        self._shipments = {shipment.id: shipment, **self._shipments}
        return shipment

    def get_shipment(self, shipment_id: str) -> ShipmentRecord | None:
        return self._shipments.get(shipment_id)

    def list_shipments(self, status: ShipmentStatus | None = None) -> list[ShipmentRecord]:
        shipments = list(self._shipments.values())
        if status is not None:
            shipments = [s for s in shipments if s.status == status]
        return shipments

    def update_shipment(self, shipment_id: str, patch: dict[str, Any]) -> ShipmentRecord | None:
        """Merge a patch into a stored shipment.  Unknown IDs are ignored."""
        shipment = self._shipments.get(shipment_id)
        if shipment is None:
            logger.warning("Patch for unknown shipment ignored", shipment_id=shipment_id)
            return None
        shipment.apply_patch(patch)
        return shipment

    # ─── Events and agents ────────────────────────────

    def add_event(self, event: ProcessingEvent) -> None:
        self.events.append(event)

    def get_shipment_events(self, shipment_id: str) -> list[ProcessingEvent]:
        return self.events.for_shipment(shipment_id)

    def clear_events(self) -> None:
        self.events.clear()

    def set_agents(self, agents: list[AgentDescriptor]) -> None:
        self.agents = list(agents)

    def attach(self, orchestrator: ShipmentOrchestrator, shipment_id: str) -> None:
        """
        Subscribe to an orchestrator's channels.  Patches are applied to
        the stored copy of `shipment_id`.
        """
        stored = self._shipments.get(shipment_id)
        if stored is not None and not stored.is_terminal:
            # The stored copy mirrors the run, which starts in PROCESSING.
            stored.status = ShipmentStatus.PROCESSING

        orchestrator.tracker.channel.subscribe(self.set_agents)
        orchestrator.events.channel.subscribe(self.add_event)
        orchestrator.shipment_updates.subscribe(
            lambda patch: self.update_shipment(shipment_id, patch)
        )

    # ─── Reporting ────────────────────────────────────

    def dashboard_stats(self) -> DashboardStats:
        shipments = list(self._shipments.values())
        stats = DashboardStats(total_shipments=len(shipments))

        finished_seconds: list[float] = []
        findings_total = 0
        findings_passed = 0

        for shipment in shipments:
            if shipment.status in ACTIVE_STATUSES:
                stats.active_shipments += 1
            if shipment.status == ShipmentStatus.CLEARED:
                stats.cleared_shipments += 1
            if shipment.status in TERMINAL_STATUSES or shipment.status == ShipmentStatus.PENDING_REVIEW:
                finished_seconds.append(
                    (shipment.updated_at - shipment.created_at).total_seconds()
                )
            if shipment.duty_calculation is not None:
                stats.total_duties_paid += shipment.duty_calculation.total_amount
            for check in shipment.compliance_checks or []:
                findings_total += 1
                if check.status == ComplianceOutcome.PASSED:
                    findings_passed += 1
            if shipment.risk_score is not None:
                stats.risk_distribution[str(shipment.risk_score.level)] += 1

        if finished_seconds:
            stats.avg_processing_time = round(sum(finished_seconds) / len(finished_seconds), 1)
        if findings_total:
            stats.compliance_rate = round(findings_passed / findings_total * 100, 1)
        stats.total_duties_paid = round(stats.total_duties_paid, 2)
        return stats
