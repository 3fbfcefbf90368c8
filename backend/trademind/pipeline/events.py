"""
Audit event stream.

EventLogger builds ProcessingEvents and hands them straight to its
channel; it never buffers.  Retention (the most recent N events) is the
job of the consuming EventStore.
"""

from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator

from trademind.core.constants import EventSeverity, StageType
from trademind.core.logging import get_logger
from trademind.pipeline.channels import Channel

logger = get_logger("pipeline.events")

DEFAULT_RETENTION_LIMIT = 100


@dataclass(frozen=True)
class ProcessingEvent:
    """One immutable entry in the audit trail."""

    shipment_id: str
    stage: StageType
    agent_name: str
    action: str
    detail: str
    severity: EventSeverity = EventSeverity.INFO
    data: dict[str, Any] | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shipment_id": self.shipment_id,
            "stage": str(self.stage),
            "agent_name": self.agent_name,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "detail": self.detail,
            "severity": str(self.severity),
            "data": self.data,
        }


class EventLogger:
    """Creates timestamped events and publishes them synchronously."""

    def __init__(self) -> None:
        self.channel: Channel[ProcessingEvent] = Channel("events")

    def emit(
        self,
        shipment_id: str,
        stage: StageType,
        agent_name: str,
        action: str,
        detail: str,
        severity: EventSeverity = EventSeverity.INFO,
        data: dict[str, Any] | None = None,
    ) -> ProcessingEvent:
        event = ProcessingEvent(
            shipment_id=shipment_id,
            stage=stage,
            agent_name=agent_name,
            action=action,
            detail=detail,
            severity=severity,
            data=data,
        )

        log = logger.bind(shipment_id=shipment_id, stage=str(stage), agent=agent_name)
        if severity == EventSeverity.ERROR:
            log.error(action, detail=detail)
        elif severity == EventSeverity.WARNING:
            log.warning(action, detail=detail)
        else:
            log.info(action, detail=detail)

        self.channel.publish(event)
        return event


class EventStore:
    """Keeps the most recent `limit` events; the oldest are evicted first."""

    def __init__(self, limit: int = DEFAULT_RETENTION_LIMIT) -> None:
        self.limit = limit
        self._events: deque[ProcessingEvent] = deque(maxlen=limit)

    def append(self, event: ProcessingEvent) -> None:
        self._events.append(event)

    def __iter__(self) -> Iterator[ProcessingEvent]:
        """Oldest first."""
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def recent(self) -> list[ProcessingEvent]:
        """Newest first, as an activity feed shows them."""
        return list(reversed(self._events))

    def for_shipment(self, shipment_id: str) -> list[ProcessingEvent]:
        return [e for e in self._events if e.shipment_id == shipment_id]

    def clear(self) -> None:
        self._events.clear()
