"""
Disposition: final shipment status from the accumulated results.

Rules are checked in priority order; the first match wins:

    1. any compliance finding failed       → rejected
    2. risk level high or critical         → pending_review
    3. any document failed validation      → pending_review
    4. otherwise                           → cleared
"""

from __future__ import annotations

from trademind.core.constants import (
    ComplianceOutcome,
    RiskLevel,
    ShipmentStatus,
    ValidationStatus,
)
from trademind.pipeline.context import ShipmentRecord

REVIEW_RISK_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.CRITICAL})


def resolve_disposition(shipment: ShipmentRecord) -> ShipmentStatus:
    """Pure function of the shipment's compliance, risk and documents."""
    if any(
        check.status == ComplianceOutcome.FAILED
        for check in shipment.compliance_checks or []
    ):
        return ShipmentStatus.REJECTED

    if shipment.risk_score is not None and shipment.risk_score.level in REVIEW_RISK_LEVELS:
        return ShipmentStatus.PENDING_REVIEW

    if any(
        doc.validation_status == ValidationStatus.INVALID
        for doc in shipment.documents
    ):
        return ShipmentStatus.PENDING_REVIEW

    return ShipmentStatus.CLEARED
