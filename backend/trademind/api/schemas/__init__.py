"""API schema package."""

from trademind.api.schemas.shipments import (
    DocumentIn,
    GoodsIn,
    PartyIn,
    ShipmentCreate,
)

__all__ = ["DocumentIn", "GoodsIn", "PartyIn", "ShipmentCreate"]
