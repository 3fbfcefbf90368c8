"""
SimulatedStageFunctions: randomized placeholders for every stage.

Latencies, value ranges and failure rates mirror the demo behaviour the
dashboard was built against.  Pass a seeded random.Random (or set
SIMULATION_SEED) for reproducible runs, and SIMULATION_DELAY_SCALE=0 to
skip the artificial latency.
"""

from __future__ import annotations

import asyncio
import random
from datetime import date
from typing import TYPE_CHECKING

from trademind.core.config import settings
from trademind.core.constants import ComplianceOutcome, FindingSeverity
from trademind.core.logging import get_logger
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

logger = get_logger(__name__)

# Seconds each simulated call takes before scaling.
BASE_DELAYS: dict[str, float] = {
    "intake": 1.5,
    "validate": 1.2,
    "classify": 2.0,
    "duty": 1.0,
    "compliance": 1.8,
    "risk": 1.5,
    "route": 2.5,
}

HS_CATALOG: list[dict[str, str]] = [
    {
        "code": "8542.31",
        "description": "Electronic integrated circuits: Processors and controllers",
        "category": "Electronics",
    },
    {"code": "9018.19", "description": "Medical instruments and appliances", "category": "Medical"},
    {"code": "8471.30", "description": "Portable automatic data processing machines", "category": "Electronics"},
    {
        "code": "8517.62",
        "description": "Machines for reception, conversion and transmission",
        "category": "Telecommunications",
    },
    {"code": "9027.50", "description": "Instruments using optical radiations", "category": "Scientific"},
]

INVALID_DOCUMENT_RATE = 0.1
MAX_DUTY_RATE = 0.15


class SimulatedStageFunctions:
    """Non-deterministic stand-ins for the real stage services."""

    def __init__(
        self,
        rng: random.Random | None = None,
        delay_scale: float | None = None,
        tax_rate: float | None = None,
        currency: str | None = None,
    ) -> None:
        self.rng = rng or random.Random(settings.SIMULATION_SEED)
        self.delay_scale = (
            settings.SIMULATION_DELAY_SCALE if delay_scale is None else delay_scale
        )
        self.tax_rate = settings.DEFAULT_TAX_RATE if tax_rate is None else tax_rate
        self.currency = currency or settings.DUTY_CURRENCY

    async def _delay(self, operation: str) -> None:
        seconds = BASE_DELAYS[operation] * self.delay_scale
        if seconds > 0:
            await asyncio.sleep(seconds)

    # ─── Document stages ──────────────────────────────

    async def intake(self, document: Document) -> IntakeExtraction:
        await self._delay("intake")
        suffix = "".join(self.rng.choices("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", k=9))
        return IntakeExtraction(
            extracted_fields={
                "invoice_number": f"INV-{suffix}",
                "date": date.today().isoformat(),
                "total_value": self.rng.randint(50_000, 549_999),
                "items": self.rng.randint(1, 20),
            },
            confidence=round(92 + self.rng.random() * 7, 1),
            processing_time=BASE_DELAYS["intake"],
        )

    async def validate(self, document: Document) -> DocumentValidation:
        await self._delay("validate")
        if self.rng.random() > INVALID_DOCUMENT_RATE:
            return DocumentValidation(valid=True)
        return DocumentValidation(
            valid=False,
            errors=["Missing required field: Exporter Tax ID", "Invalid date format"],
        )

    # ─── Shipment stages ──────────────────────────────

    async def classify(self, description: str) -> HSClassification:
        await self._delay("classify")
        selected = self.rng.choice(HS_CATALOG)
        return HSClassification(
            code=selected["code"],
            description=selected["description"],
            category=selected["category"],
            confidence=round(88 + self.rng.random() * 10, 1),
        )

    async def duty(
        self,
        hs_code: str,
        value: float,
        origin: str,
        destination: str,
    ) -> DutyCalculation:
        await self._delay("duty")
        duty_rate = self.rng.random() * MAX_DUTY_RATE
        duty_amount = value * duty_rate
        tax_amount = value * self.tax_rate
        return DutyCalculation(
            hs_code=hs_code,
            base_value=value,
            duty_rate=round(duty_rate, 2),
            duty_amount=round(duty_amount),
            tax_amount=round(tax_amount),
            total_amount=round(duty_amount + tax_amount),
            currency=self.currency,
        )

    async def compliance(self, shipment: ShipmentRecord) -> list[ComplianceFinding]:
        await self._delay("compliance")
        license_ok = self.rng.random() > 0.2
        dual_use_ok = self.rng.random() > 0.1
        docs_ok = self.rng.random() > 0.15
        return [
            ComplianceFinding(
                rule="Export License Verification",
                status=ComplianceOutcome.PASSED if license_ok else ComplianceOutcome.WARNING,
                message=(
                    "Valid export license found"
                    if license_ok
                    else "Export license expires in 30 days"
                ),
                severity=FindingSeverity.HIGH,
            ),
            ComplianceFinding(
                rule="Dual-Use Goods Check",
                status=ComplianceOutcome.PASSED if dual_use_ok else ComplianceOutcome.FAILED,
                message=(
                    "No dual-use restrictions apply"
                    if dual_use_ok
                    else "Requires additional authorization"
                ),
                severity=FindingSeverity.MEDIUM,
            ),
            ComplianceFinding(
                rule="Sanctions Screening",
                status=ComplianceOutcome.PASSED,
                message="No sanctions matches found",
                severity=FindingSeverity.HIGH,
            ),
            ComplianceFinding(
                rule="Documentation Completeness",
                status=ComplianceOutcome.PASSED if docs_ok else ComplianceOutcome.WARNING,
                message=(
                    "All required documents present"
                    if docs_ok
                    else "Certificate of Origin recommended"
                ),
                severity=FindingSeverity.LOW,
            ),
        ]

    async def risk(self, shipment: ShipmentRecord) -> RiskAssessment:
        await self._delay("risk")
        factors = {
            "document_completeness": 85 + self.rng.random() * 15,
            "compliance_history": 80 + self.rng.random() * 20,
            "value_accuracy": 85 + self.rng.random() * 15,
            "origin_verification": 80 + self.rng.random() * 20,
        }
        return RiskAssessment.from_factors(factors)

    async def route(
        self,
        origin: str,
        destination: str,
        weight: float,
    ) -> RouteOptimization:
        await self._delay("route")
        return RouteOptimization(
            path=[origin, "Transit Hub", destination],
            estimated_cost=self.rng.randint(5_000, 14_999),
            estimated_days=self.rng.randint(10, 29),
            confidence=round(88 + self.rng.random() * 10, 1),
        )
