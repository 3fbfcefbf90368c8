"""
Shipment endpoints: create, list, detail, process and event feed.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from trademind.agents.base import StageFunctions
from trademind.api.deps import get_stage_functions, get_store
from trademind.api.schemas.shipments import ShipmentCreate
from trademind.core.constants import ShipmentStatus
from trademind.core.logging import get_logger
from trademind.pipeline.agents import AgentStateTracker
from trademind.pipeline.engine import ShipmentOrchestrator
from trademind.pipeline.errors import StageExecutionError
from trademind.repositories.shipments import ShipmentStore

router = APIRouter(prefix="/shipments", tags=["Shipments"])
logger = get_logger(__name__)


def _get_or_404(store: ShipmentStore, shipment_id: str):
    shipment = store.get_shipment(shipment_id)
    if shipment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Shipment {shipment_id} not found",
        )
    return shipment


# ─── Create ───────────────────────────────────────────────
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_shipment(
    payload: ShipmentCreate,
    store: ShipmentStore = Depends(get_store),
):
    """Create a draft shipment with its documents."""
    shipment = store.add_shipment(payload.to_record())
    logger.info(
        "Shipment created",
        shipment_id=shipment.id,
        documents=len(shipment.documents),
    )
    return shipment.to_dict()


# ─── List ─────────────────────────────────────────────────
@router.get("")
async def list_shipments(
    status_filter: ShipmentStatus | None = Query(None, alias="status"),
    store: ShipmentStore = Depends(get_store),
):
    """List shipments, newest first."""
    shipments = store.list_shipments(status=status_filter)
    return {"data": [s.to_dict() for s in shipments], "total": len(shipments)}


# ─── Detail ───────────────────────────────────────────────
@router.get("/{shipment_id}")
async def get_shipment(shipment_id: str, store: ShipmentStore = Depends(get_store)):
    return _get_or_404(store, shipment_id).to_dict()


# ─── Process ──────────────────────────────────────────────
@router.post("/{shipment_id}/process")
async def process_shipment(
    shipment_id: str,
    store: ShipmentStore = Depends(get_store),
    functions: StageFunctions = Depends(get_stage_functions),
):
    """
    Run the full pipeline on a shipment and wait for the result.

    Patches, events and agent updates stream into the store while the
    run progresses.
    """
    shipment = _get_or_404(store, shipment_id)
    if shipment.is_terminal:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Shipment {shipment_id} is already {shipment.status}",
        )

    # Agent metrics carry over from the store's latest snapshot.
    orchestrator = ShipmentOrchestrator(
        functions, tracker=AgentStateTracker(agents=store.agents)
    )
    store.attach(orchestrator, shipment_id)

    try:
        await orchestrator.process_shipment(shipment)
    except StageExecutionError as exc:
        # Keep the partial results but make the shipment runnable again.
        shipment.status = ShipmentStatus.DRAFT
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": str(exc),
                "stage": exc.stage,
                "run": orchestrator.last_run.to_dict() if orchestrator.last_run else None,
            },
        ) from exc

    return {
        "shipment": store.get_shipment(shipment_id).to_dict(),
        "run": orchestrator.last_run.to_dict(),
    }


# ─── Events ───────────────────────────────────────────────
@router.get("/{shipment_id}/events")
async def get_shipment_events(shipment_id: str, store: ShipmentStore = Depends(get_store)):
    """Retained events for one shipment, oldest first."""
    _get_or_404(store, shipment_id)
    events = store.get_shipment_events(shipment_id)
    return {"data": [e.to_dict() for e in events], "total": len(events)}
