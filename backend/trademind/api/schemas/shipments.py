"""Shipment request schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from trademind.core.constants import DocumentType
from trademind.pipeline.context import Document, Goods, Party, ShipmentRecord


class PartyIn(BaseModel):
    """Exporter or importer on a new shipment."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str = ""
    country: str = Field(..., min_length=2, max_length=100)

    def to_party(self) -> Party:
        return Party(name=self.name, address=self.address, country=self.country)


class GoodsIn(BaseModel):
    """Goods description on a new shipment."""

    description: str = Field(..., min_length=1)
    quantity: float = Field(0, ge=0)
    unit: str = "pcs"
    value: float = Field(..., ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    weight: float = Field(0, ge=0)
    weight_unit: str = "kg"

    def to_goods(self) -> Goods:
        return Goods(**self.model_dump())


class DocumentIn(BaseModel):
    """An uploaded document; the type is inferred from the name if omitted."""

    file_name: str = Field(..., min_length=1)
    file_url: str = ""
    type: DocumentType | None = None


class ShipmentCreate(BaseModel):
    """Request payload for creating a draft shipment."""

    reference_number: str | None = None
    user_id: str = ""
    exporter: PartyIn
    importer: PartyIn
    goods: GoodsIn
    documents: list[DocumentIn] = Field(default_factory=list)

    def to_record(self) -> ShipmentRecord:
        record = ShipmentRecord(
            exporter=self.exporter.to_party(),
            importer=self.importer.to_party(),
            goods=self.goods.to_goods(),
            reference_number=self.reference_number or "",
            user_id=self.user_id,
        )
        for doc in self.documents:
            record.add_document(
                Document.from_upload(
                    record.id,
                    doc.file_name,
                    file_url=doc.file_url,
                    doc_type=doc.type,
                )
            )
        return record
