"""
StageFunctions: the boundary between the orchestrator and the work.

The orchestrator only depends on this protocol.  The simulated
implementation in simulated.py stands in for real OCR, tariff,
compliance, risk and routing services; tests inject deterministic fakes.

Implementations raise any exception to signal failure; the stage runner
turns it into a StageExecutionError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from trademind.pipeline.results import (
    ComplianceFinding,
    DocumentValidation,
    DutyCalculation,
    HSClassification,
    IntakeExtraction,
    RiskAssessment,
    RouteOptimization,
)

if TYPE_CHECKING:
    from trademind.pipeline.context import Document, ShipmentRecord


@runtime_checkable
class StageFunctions(Protocol):
    """The seven async operations the pipeline calls, one per stage."""

    async def intake(self, document: Document) -> IntakeExtraction:
        """Extract data from one document."""
        ...

    async def validate(self, document: Document) -> DocumentValidation:
        """Check one document for completeness and accuracy."""
        ...

    async def classify(self, description: str) -> HSClassification:
        """Classify a goods description to an HS code."""
        ...

    async def duty(
        self,
        hs_code: str,
        value: float,
        origin: str,
        destination: str,
    ) -> DutyCalculation:
        """Compute duties and taxes for the classified goods."""
        ...

    async def compliance(self, shipment: ShipmentRecord) -> list[ComplianceFinding]:
        """Evaluate every compliance rule against the shipment."""
        ...

    async def risk(self, shipment: ShipmentRecord) -> RiskAssessment:
        """Score the shipment's risk."""
        ...

    async def route(
        self,
        origin: str,
        destination: str,
        weight: float,
    ) -> RouteOptimization:
        """Suggest a route from origin to destination."""
        ...
