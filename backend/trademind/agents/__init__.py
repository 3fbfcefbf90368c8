"""Stage function implementations the orchestrator can be wired to."""

from trademind.agents.base import StageFunctions
from trademind.agents.simulated import SimulatedStageFunctions

__all__ = ["StageFunctions", "SimulatedStageFunctions"]
