"""
Typed outputs of the seven stage functions.

These are the values the orchestrator merges into a ShipmentRecord.
Each one serialises to a JSON-safe dict via to_dict().
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from trademind.core.constants import (
    ComplianceOutcome,
    FindingSeverity,
    RiskLevel,
)


# ═══════════════════════════════════════════════════════════
#  Document-level results
# ═══════════════════════════════════════════════════════════

@dataclass
class IntakeExtraction:
    """Data pulled out of one document by the intake stage."""

    extracted_fields: dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    processing_time: float = 0.0

    @property
    def field_count(self) -> int:
        return len(self.extracted_fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "extracted_fields": dict(self.extracted_fields),
            "field_count": self.field_count,
            "confidence": self.confidence,
            "processing_time": self.processing_time,
        }


@dataclass
class DocumentValidation:
    """Outcome of validating one document."""

    valid: bool
    errors: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════
#  Shipment-level results
# ═══════════════════════════════════════════════════════════

@dataclass
class HSClassification:
    """HS-style tariff classification of the goods."""

    code: str
    description: str
    confidence: float
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "description": self.description,
            "confidence": self.confidence,
            "category": self.category,
        }


@dataclass
class DutyCalculation:
    """Duty and tax breakdown in a single currency."""

    hs_code: str
    base_value: float
    duty_rate: float
    duty_amount: float
    tax_amount: float
    total_amount: float
    currency: str = "USD"

    def to_dict(self) -> dict[str, Any]:
        return {
            "hs_code": self.hs_code,
            "base_value": self.base_value,
            "duty_rate": self.duty_rate,
            "duty_amount": self.duty_amount,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
            "currency": self.currency,
        }


@dataclass
class ComplianceFinding:
    """Outcome of one named compliance rule."""

    rule: str
    status: ComplianceOutcome
    message: str
    severity: FindingSeverity
    id: str = field(default_factory=lambda: f"comp-{uuid.uuid4().hex[:12]}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "rule": self.rule,
            "status": str(self.status),
            "message": self.message,
            "severity": str(self.severity),
        }


# ─── Risk scoring ─────────────────────────────────────

# Weight of each factor's shortfall (100 - score) in the overall score.
RISK_FACTOR_WEIGHTS: dict[str, float] = {
    "document_completeness": 0.25,
    "compliance_history": 0.35,
    "value_accuracy": 0.20,
    "origin_verification": 0.20,
}

RISK_RECOMMENDATIONS: dict[RiskLevel, list[str]] = {
    RiskLevel.LOW: [
        "Shipment cleared for processing",
        "Standard processing time applies",
    ],
    RiskLevel.MEDIUM: [
        "Additional document review recommended",
        "Estimated 1-2 day delay",
    ],
    RiskLevel.HIGH: [
        "Manual inspection required",
        "Compliance officer review needed",
    ],
    RiskLevel.CRITICAL: [
        "Immediate review required",
        "Potential regulatory violation",
        "Contact compliance team",
    ],
}


def weighted_overall(factors: dict[str, float]) -> float:
    """Overall score = 100 minus the weighted shortfall of every factor, unrounded."""
    shortfall = sum(
        (100 - factors.get(name, 100)) * weight
        for name, weight in RISK_FACTOR_WEIGHTS.items()
    )
    return 100 - shortfall


def derive_risk_level(overall: float) -> RiskLevel:
    """Higher scores are safer: >=85 low, >=70 medium, >=50 high, else critical."""
    if overall >= 85:
        return RiskLevel.LOW
    if overall >= 70:
        return RiskLevel.MEDIUM
    if overall >= 50:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


@dataclass
class RiskAssessment:
    """Overall risk score, its four factors and the derived tier."""

    overall: float
    factors: dict[str, float]
    level: RiskLevel
    recommendations: list[str] = field(default_factory=list)

    @classmethod
    def from_factors(cls, factors: dict[str, float]) -> RiskAssessment:
        overall = weighted_overall(factors)
        # Tier from the exact score; only the stored value is rounded.
        level = derive_risk_level(overall)
        return cls(
            overall=round(overall, 1),
            factors=dict(factors),
            level=level,
            recommendations=list(RISK_RECOMMENDATIONS[level]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "factors": dict(self.factors),
            "level": str(self.level),
            "recommendations": list(self.recommendations),
        }


@dataclass
class RouteOptimization:
    """Suggested path with estimated cost and duration."""

    path: list[str]
    estimated_cost: float
    estimated_days: int
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": list(self.path),
            "estimated_cost": self.estimated_cost,
            "estimated_days": self.estimated_days,
            "confidence": self.confidence,
        }
