"""
Agent State Tracker: status, progress and metrics of every agent.

One tracker is created per orchestrator (or passed in explicitly); there
is no module-level agent list.  Agents are keyed by stage type, and each
update notifies the agent channel with the full, ordered agent list.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from trademind.core.constants import AgentStatus, StageType
from trademind.core.logging import get_logger
from trademind.pipeline.channels import Channel

logger = get_logger(__name__)


@dataclass(frozen=True)
class AgentMetrics:
    """Cumulative counters for one agent."""

    total_processed: int = 0
    success_rate: float = 100.0         # percent
    avg_processing_time: float = 0.0    # seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "success_rate": self.success_rate,
            "avg_processing_time": self.avg_processing_time,
        }


@dataclass(frozen=True)
class AgentDescriptor:
    """
    Snapshot of one agent.  Frozen: updates produce a new descriptor,
    so lists handed to observers never change underneath them.
    """

    name: str
    type: StageType
    id: str = field(default_factory=lambda: f"agent-{uuid.uuid4().hex[:8]}")
    status: AgentStatus = AgentStatus.IDLE
    progress: float = 0
    current_task: str | None = None
    last_run: datetime | None = None
    metrics: AgentMetrics | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": str(self.type),
            "status": str(self.status),
            "progress": self.progress,
            "current_task": self.current_task,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "metrics": self.metrics.to_dict() if self.metrics else None,
        }


# Standard roster, in pipeline order.
DEFAULT_AGENT_NAMES: dict[StageType, str] = {
    StageType.DOCUMENT_INTAKE: "Document Intake Agent",
    StageType.VALIDATION: "Validation Agent",
    StageType.HS_CODE: "HS Code Agent",
    StageType.DUTY: "Duty Calculator Agent",
    StageType.COMPLIANCE: "Compliance Agent",
    StageType.RISK: "Risk Scoring Agent",
    StageType.ROUTE: "Quantum Optimizer",
    StageType.LEARNING: "Learning Agent",
}


def default_agents() -> list[AgentDescriptor]:
    """Fresh idle descriptors for every agent kind."""
    return [
        AgentDescriptor(name=name, type=agent_type, metrics=AgentMetrics())
        for agent_type, name in DEFAULT_AGENT_NAMES.items()
    ]


class AgentStateTracker:
    """
    Holds one AgentDescriptor per stage type and applies partial updates.

    Usage::

        tracker = AgentStateTracker()
        tracker.channel.subscribe(lambda agents: print(agents))
        tracker.set_agent_state(StageType.DUTY, status=AgentStatus.PROCESSING, progress=0)
    """

    def __init__(self, agents: list[AgentDescriptor] | None = None) -> None:
        roster = agents if agents is not None else default_agents()
        self._agents: dict[StageType, AgentDescriptor] = {
            agent.type: agent for agent in roster
        }
        self.channel: Channel[list[AgentDescriptor]] = Channel("agents")

    @property
    def agents(self) -> list[AgentDescriptor]:
        return list(self._agents.values())

    def get(self, agent_type: StageType) -> AgentDescriptor | None:
        return self._agents.get(agent_type)

    def set_agent_state(self, agent_type: StageType, **updates: Any) -> None:
        """
        Merge `updates` into the agent of `agent_type` and notify.

        An unknown agent type changes nothing but still notifies.
        """
        agent = self._agents.get(agent_type)
        if agent is None:
            logger.warning("No agent registered for type", agent_type=str(agent_type))
        else:
            self._agents[agent_type] = dataclasses.replace(agent, **updates)
        self.channel.publish(self.agents)

    def record_run(
        self,
        agent_type: StageType,
        duration_seconds: float,
        succeeded: bool,
    ) -> None:
        """Fold one finished run into the agent's cumulative metrics."""
        agent = self._agents.get(agent_type)
        if agent is None:
            self.set_agent_state(agent_type)
            return

        previous = agent.metrics or AgentMetrics(success_rate=0.0)
        count = previous.total_processed + 1
        successes = previous.success_rate / 100 * previous.total_processed
        if succeeded:
            successes += 1

        metrics = AgentMetrics(
            total_processed=count,
            success_rate=round(successes / count * 100, 1),
            avg_processing_time=round(
                (previous.avg_processing_time * previous.total_processed + duration_seconds)
                / count,
                3,
            ),
        )
        self.set_agent_state(agent_type, metrics=metrics)

    def reset(self) -> None:
        """Return every agent to idle with zero progress."""
        for agent_type, agent in self._agents.items():
            self._agents[agent_type] = dataclasses.replace(
                agent,
                status=AgentStatus.IDLE,
                progress=0,
                current_task=None,
            )
        self.channel.publish(self.agents)
