"""Shared constants and enums used across the application."""

from enum import StrEnum


class ShipmentStatus(StrEnum):
    """Lifecycle status of a shipment record."""

    DRAFT = "draft"
    PROCESSING = "processing"
    VALIDATED = "validated"
    CLEARED = "cleared"
    REJECTED = "rejected"
    PENDING_REVIEW = "pending_review"


TERMINAL_STATUSES = frozenset({ShipmentStatus.CLEARED, ShipmentStatus.REJECTED})


class StageType(StrEnum):
    """Agent / stage kinds.  LEARNING is reserved and never scheduled."""

    DOCUMENT_INTAKE = "document_intake"
    VALIDATION = "validation"
    HS_CODE = "hs_code"
    DUTY = "duty"
    COMPLIANCE = "compliance"
    RISK = "risk"
    ROUTE = "route"
    LEARNING = "learning"


class AgentStatus(StrEnum):
    """Status of an individual agent."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class EventSeverity(StrEnum):
    """Severity of a processing event in the audit stream."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class DocumentType(StrEnum):
    """Declared trade document types."""

    COMMERCIAL_INVOICE = "commercial_invoice"
    PACKING_LIST = "packing_list"
    BILL_OF_LADING = "bill_of_lading"
    CERTIFICATE_OF_ORIGIN = "certificate_of_origin"
    OTHER = "other"


class ValidationStatus(StrEnum):
    """Validation result for a document."""

    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"


class ComplianceOutcome(StrEnum):
    """Outcome of a single compliance rule."""

    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"


class FindingSeverity(StrEnum):
    """How much a compliance rule matters."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(StrEnum):
    """Risk tier derived from the overall risk score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FailurePolicy(StrEnum):
    """What the orchestrator does when a stage function raises."""

    ABORT = "abort"
    CONTINUE = "continue"


class StageRunStatus(StrEnum):
    """Status of a stage inside one orchestrator run."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
