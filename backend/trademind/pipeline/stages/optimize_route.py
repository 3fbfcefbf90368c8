"""OptimizeRouteStage: path, cost and duration from origin to destination."""

from __future__ import annotations

from typing import Any

from trademind.core.constants import StageType
from trademind.pipeline.context import ShipmentRecord
from trademind.pipeline.stage import PipelineStage, StageRun, StageSummary


class OptimizeRouteStage(PipelineStage):
    """Single call to the route optimizer."""

    stage_type = StageType.ROUTE
    agent_name = "Quantum Optimizer"
    task_label = "Optimizing route with quantum algorithms"
    start_action = "Optimizing Route"

    def start_detail(self, shipment: ShipmentRecord) -> str:
        return "Running quantum algorithms for optimal routing"

    async def execute(self, run: StageRun) -> dict[str, Any]:
        shipment = run.shipment
        run.set_progress(50)
        route = await run.call(
            self.functions.route,
            shipment.exporter.country,
            shipment.importer.country,
            shipment.goods.weight,
        )
        return {"optimized_route": route}

    def summarize(self, shipment: ShipmentRecord, patch: dict[str, Any]) -> StageSummary:
        route = patch["optimized_route"]
        return StageSummary(
            action="Route Optimization Complete",
            detail=(
                f"Optimal route: {' → '.join(route.path)} "
                f"({route.estimated_days} days, ${route.estimated_cost})"
            ),
            data={
                "path": list(route.path),
                "days": route.estimated_days,
                "cost": route.estimated_cost,
            },
        )
