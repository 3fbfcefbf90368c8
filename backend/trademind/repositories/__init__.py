"""
Repositories package: in-memory data access for the API and scripts.

Nothing here is durable; a process restart loses every shipment.  The
store is the consumer side of the orchestrator's observer channels.
"""

from trademind.repositories.shipments import DashboardStats, ShipmentStore

__all__ = ["DashboardStats", "ShipmentStore"]
