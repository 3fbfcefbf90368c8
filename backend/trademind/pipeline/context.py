"""
ShipmentRecord: mutable record carried through every stage.

This is the single source of truth for a shipment run.  Stages never
write to it directly: each stage returns a patch and the orchestrator
merges it with apply_patch() once the stage has completed, so a stage
output slot is either absent or fully populated.

Documents follow the same rule: the Validation stage records its verdicts
on copies and hands them back in its patch.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from trademind.core.constants import (
    TERMINAL_STATUSES,
    DocumentType,
    ShipmentStatus,
    StageRunStatus,
    ValidationStatus,
)
from trademind.pipeline.errors import PipelineError, ShipmentStateError
from trademind.pipeline.results import (
    ComplianceFinding,
    DocumentValidation,
    DutyCalculation,
    HSClassification,
    RiskAssessment,
    RouteOptimization,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ═══════════════════════════════════════════════════════════
#  Parties and goods
# ═══════════════════════════════════════════════════════════

@dataclass
class Party:
    """Exporter or importer."""

    name: str
    address: str = ""
    country: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "address": self.address, "country": self.country}


@dataclass
class Goods:
    """What is being shipped."""

    description: str
    quantity: float = 0
    unit: str = "pcs"
    value: float = 0.0
    currency: str = "USD"
    weight: float = 0.0
    weight_unit: str = "kg"

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            "value": self.value,
            "currency": self.currency,
            "weight": self.weight,
            "weight_unit": self.weight_unit,
        }


# ═══════════════════════════════════════════════════════════
#  Document
# ═══════════════════════════════════════════════════════════

# Checked in order; first keyword found in the lower-cased file name wins.
_DOCUMENT_TYPE_KEYWORDS: list[tuple[tuple[str, ...], DocumentType]] = [
    (("invoice",), DocumentType.COMMERCIAL_INVOICE),
    (("packing",), DocumentType.PACKING_LIST),
    (("bill", "lading"), DocumentType.BILL_OF_LADING),
    (("certificate", "origin"), DocumentType.CERTIFICATE_OF_ORIGIN),
]


def infer_document_type(file_name: str) -> DocumentType:
    """Guess the document type from its file name."""
    lower = file_name.lower()
    for keywords, doc_type in _DOCUMENT_TYPE_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return doc_type
    return DocumentType.OTHER


@dataclass
class Document:
    """A trade document attached to a shipment."""

    shipment_id: str
    file_name: str
    type: DocumentType = DocumentType.OTHER
    id: str = field(default_factory=lambda: f"doc-{uuid.uuid4().hex[:12]}")
    file_url: str = ""
    uploaded_at: datetime = field(default_factory=_utcnow)
    validation_status: ValidationStatus = ValidationStatus.PENDING
    validation_errors: list[str] = field(default_factory=list)

    @classmethod
    def from_upload(
        cls,
        shipment_id: str,
        file_name: str,
        file_url: str = "",
        doc_type: DocumentType | None = None,
    ) -> Document:
        """Build a pending document, inferring its type unless one is given."""
        return cls(
            shipment_id=shipment_id,
            file_name=file_name,
            type=doc_type or infer_document_type(file_name),
            file_url=file_url,
        )

    @property
    def name(self) -> str:
        return self.file_name

    def apply_validation(self, validation: DocumentValidation) -> None:
        """Record the Validation stage's verdict on this document."""
        self.validation_status = (
            ValidationStatus.VALID if validation.valid else ValidationStatus.INVALID
        )
        self.validation_errors = list(validation.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shipment_id": self.shipment_id,
            "type": str(self.type),
            "file_name": self.file_name,
            "file_url": self.file_url,
            "uploaded_at": _iso(self.uploaded_at),
            "validation_status": str(self.validation_status),
            "validation_errors": list(self.validation_errors),
        }


# ═══════════════════════════════════════════════════════════
#  StageResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StageResult:
    """Outcome of a single stage inside one orchestrator run."""

    stage: str
    status: str                     # StageRunStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == StageRunStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "status": self.status,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


# ═══════════════════════════════════════════════════════════
#  ShipmentRecord
# ═══════════════════════════════════════════════════════════

@dataclass
class ShipmentRecord:
    """
    A trade shipment and everything the stages have learned about it.

    Populated progressively: intake and validation fill in per-document
    data, later stages fill in classification, duties, compliance,
    risk and routing.
    """

    # ─── Identity ──────────────────────────────────────
    exporter: Party
    importer: Party
    goods: Goods
    id: str = field(default_factory=lambda: f"shp-{uuid.uuid4().hex[:12]}")
    reference_number: str = ""
    user_id: str = ""
    status: ShipmentStatus = ShipmentStatus.DRAFT
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # ─── Documents ────────────────────────────────────
    documents: list[Document] = field(default_factory=list)

    # ─── Stage outputs (None until the stage completes) ──
    hs_code: HSClassification | None = None
    duty_calculation: DutyCalculation | None = None
    compliance_checks: list[ComplianceFinding] | None = None
    risk_score: RiskAssessment | None = None
    optimized_route: RouteOptimization | None = None

    # Raw per-stage summaries, keyed by stage type.
    agent_results: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.reference_number:
            self.reference_number = f"REF-{self.id[-8:].upper()}"

    # ─── Helpers ──────────────────────────────────────

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def add_document(self, document: Document) -> None:
        """Attach a document created at intake."""
        self.documents.append(document)

    def apply_patch(self, patch: dict[str, Any]) -> None:
        """
        Merge a partial update into the record.

        `agent_results` is merged key by key; every other key replaces
        the field wholesale.

        Raises:
            ShipmentStateError: If the record is already cleared/rejected.
            PipelineError: If the patch names an unknown field.
        """
        if self.is_terminal:
            raise ShipmentStateError(
                f"Shipment {self.id} is {self.status}; no further writes allowed",
                shipment_id=self.id,
                details={"patch_keys": sorted(patch)},
            )

        for key, value in patch.items():
            if key == "agent_results":
                self.agent_results.update(value)
            elif key in self.__dataclass_fields__ and key != "id":
                setattr(self, key, value)
            else:
                raise PipelineError(
                    f"Cannot patch unknown shipment field '{key}'",
                    shipment_id=self.id,
                )

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API responses and observers."""
        return {
            "id": self.id,
            "reference_number": self.reference_number,
            "user_id": self.user_id,
            "status": str(self.status),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "exporter": self.exporter.to_dict(),
            "importer": self.importer.to_dict(),
            "goods": self.goods.to_dict(),
            "documents": [d.to_dict() for d in self.documents],
            "hs_code": self.hs_code.to_dict() if self.hs_code else None,
            "duty_calculation": (
                self.duty_calculation.to_dict() if self.duty_calculation else None
            ),
            "compliance_checks": (
                [c.to_dict() for c in self.compliance_checks]
                if self.compliance_checks is not None
                else None
            ),
            "risk_score": self.risk_score.to_dict() if self.risk_score else None,
            "optimized_route": (
                self.optimized_route.to_dict() if self.optimized_route else None
            ),
            "agent_results": dict(self.agent_results),
        }
