"""Shared dependencies for API routes."""

from __future__ import annotations

from trademind.agents.base import StageFunctions
from trademind.agents.simulated import SimulatedStageFunctions
from trademind.core.config import settings
from trademind.repositories.shipments import ShipmentStore

_store = ShipmentStore(event_limit=settings.EVENT_RETENTION_LIMIT)


def get_store() -> ShipmentStore:
    """The process-wide in-memory shipment store."""
    return _store


def get_stage_functions() -> StageFunctions:
    """Stage functions used by /process; overridden in tests."""
    return SimulatedStageFunctions()
