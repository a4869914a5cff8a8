from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Literal


class SettlementRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transaction_id: str = Field(..., min_length=1, max_length=255)
    status: Literal["accepted"] = "accepted"


class SettlementResponse(BaseModel):
    message: str
    offer_id: str
    transaction_id: str
    updated: bool
    rivals_rejected: int
    inserted: bool
    property_marked_sold: bool
    sale_id: Optional[str] = None


class SaleRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    offer_id: str
    transaction_id: str
    property_id: str
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    sold_price: str
    buyer_email: str
    buyer_name: Optional[str] = None
    agent_email: str
    sold_at: str
