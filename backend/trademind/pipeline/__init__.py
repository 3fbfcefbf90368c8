"""
Shipment pipeline: the orchestration engine.

Runs a shipment through intake, validation, classification, duty,
compliance, risk and routing stages, tracking agent state and emitting
an auditable event stream along the way.
"""

from trademind.pipeline.agents import AgentDescriptor, AgentStateTracker
from trademind.pipeline.context import Document, Goods, Party, ShipmentRecord
from trademind.pipeline.disposition import resolve_disposition
from trademind.pipeline.engine import RunSummary, ShipmentOrchestrator
from trademind.pipeline.events import EventLogger, EventStore, ProcessingEvent

__all__ = [
    "AgentDescriptor",
    "AgentStateTracker",
    "Document",
    "EventLogger",
    "EventStore",
    "Goods",
    "Party",
    "ProcessingEvent",
    "RunSummary",
    "ShipmentOrchestrator",
    "ShipmentRecord",
    "resolve_disposition",
]
