from typing import Iterable

import pytest
from httpx import ASGITransport, AsyncClient

from trademind.core.constants import ComplianceOutcome, FindingSeverity
from trademind.pipeline.context import Document, Goods, Party, ShipmentRecord
from trademind.pipeline.results import (
    ComplianceFinding,
    DocumentValidation,
    DutyCalculation,
    HSClassification,
    IntakeExtraction,
    RiskAssessment,
    RouteOptimization,
)

PASSED = ComplianceOutcome.PASSED
FAILED = ComplianceOutcome.FAILED
WARNING = ComplianceOutcome.WARNING

COMPLETION_ACTIONS = [
    "Document Intake Complete",
    "Validation Complete",
    "Classification Complete",
    "Duty Calculation Complete",
    "Compliance Checks Complete",
    "Risk Assessment Complete",
    "Route Optimization Complete",
]


def risk_factors(score: float) -> dict[str, float]:
    """Four equal factors; the weighted overall equals `score`."""
    return {
        "document_completeness": score,
        "compliance_history": score,
        "value_accuracy": score,
        "origin_verification": score,
    }


class FakeStageFunctions:
    """Deterministic stage functions with knobs for each outcome."""

    def __init__(
        self,
        *,
        invalid_documents: Iterable[str] = (),
        finding_statuses: Iterable[ComplianceOutcome] = (PASSED, PASSED, PASSED, PASSED),
        risk_score: float = 95.0,
        fail_on: Iterable[str] = (),
        fail_on_call: dict[str, int] | None = None,
    ) -> None:
        self.invalid_documents = set(invalid_documents)
        self.finding_statuses = list(finding_statuses)
        self.risk_score = risk_score
        self.fail_on = set(fail_on)
        # name -> 1-based call number that raises
        self.fail_on_call = dict(fail_on_call or {})
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on or self.fail_on_call.get(name) == self.calls.count(name):
            raise RuntimeError(f"{name} service unavailable")

    async def intake(self, document):
        self._record("intake")
        return IntakeExtraction(
            extracted_fields={"invoice_number": "INV-0001", "items": 3},
            confidence=95.0,
        )

    async def validate(self, document):
        self._record("validate")
        if document.file_name in self.invalid_documents:
            return DocumentValidation(
                valid=False,
                errors=["Missing required field: Exporter Tax ID"],
            )
        return DocumentValidation(valid=True)

    async def classify(self, description):
        self._record("classify")
        return HSClassification(
            code="8471.30",
            description="Portable automatic data processing machines",
            confidence=95.0,
            category="Electronics",
        )

    async def duty(self, hs_code, value, origin, destination):
        self._record("duty")
        return DutyCalculation(
            hs_code=hs_code,
            base_value=value,
            duty_rate=0.05,
            duty_amount=value * 0.05,
            tax_amount=value * 0.2,
            total_amount=value * 0.25,
            currency="USD",
        )

    async def compliance(self, shipment):
        self._record("compliance")
        return [
            ComplianceFinding(
                rule=f"Rule {index + 1}",
                status=status,
                message=f"Rule {index + 1} evaluated",
                severity=FindingSeverity.MEDIUM,
            )
            for index, status in enumerate(self.finding_statuses)
        ]

    async def risk(self, shipment):
        self._record("risk")
        return RiskAssessment.from_factors(risk_factors(self.risk_score))

    async def route(self, origin, destination, weight):
        self._record("route")
        return RouteOptimization(
            path=[origin, "Transit Hub", destination],
            estimated_cost=7500,
            estimated_days=14,
            confidence=92.0,
        )


def build_shipment(document_names: Iterable[str] = ("invoice.pdf", "packing_list.pdf")) -> ShipmentRecord:
    shipment = ShipmentRecord(
        exporter=Party(name="Acme Exports", address="1 Dock Rd", country="China"),
        importer=Party(name="Globex Imports", address="9 Bay St", country="United States"),
        goods=Goods(
            description="Laptop computers",
            quantity=200,
            unit="pcs",
            value=100_000.0,
            currency="USD",
            weight=800.0,
        ),
        reference_number="REF-TEST-001",
    )
    for name in document_names:
        shipment.add_document(Document.from_upload(shipment.id, name))
    return shipment


@pytest.fixture
def shipment() -> ShipmentRecord:
    return build_shipment()


@pytest.fixture
def fake_functions() -> FakeStageFunctions:
    return FakeStageFunctions()


@pytest.fixture
def store():
    from trademind.repositories.shipments import ShipmentStore

    return ShipmentStore()


@pytest.fixture
def api_functions() -> FakeStageFunctions:
    """Stage functions the API uses; tests may tweak them before a request."""
    return FakeStageFunctions()


@pytest.fixture
async def client(store, api_functions):
    from trademind.api.deps import get_stage_functions, get_store
    from trademind.main import app

    functions = api_functions
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_stage_functions] = lambda: functions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
