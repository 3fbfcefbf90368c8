"""
Dashboard endpoints: agent snapshot, aggregate stats and the event feed.
"""

from fastapi import APIRouter, Depends, status

from trademind.api.deps import get_store
from trademind.repositories.shipments import ShipmentStore

router = APIRouter(tags=["Dashboard"])


@router.get("/agents")
async def list_agents(store: ShipmentStore = Depends(get_store)):
    """Latest agent states seen by the store."""
    return {"data": [a.to_dict() for a in store.agents]}


@router.get("/stats")
async def dashboard_stats(store: ShipmentStore = Depends(get_store)):
    return store.dashboard_stats().to_dict()


@router.get("/events")
async def recent_events(store: ShipmentStore = Depends(get_store)):
    """All retained events, newest first."""
    events = store.events.recent()
    return {"data": [e.to_dict() for e in events], "total": len(events)}


@router.delete("/events", status_code=status.HTTP_204_NO_CONTENT)
async def clear_events(store: ShipmentStore = Depends(get_store)):
    store.clear_events()
