from pydantic import BaseModel, ConfigDict, EmailStr, Field, AliasChoices
from pydantic.alias_generators import to_camel
from typing import Optional, Literal


class OfferCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    property_id: str = Field(..., min_length=1)
    buyer_email: EmailStr
    buyer_name: Optional[str] = None
    offered_amount: float = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("offered_amount", "offeredAmount", "amount"),
    )


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    agent_email: str
    buyer_email: str
    buyer_name: Optional[str] = None
    offered_amount: str
    status: str
    transaction_id: Optional[str] = None
    created_at: str
    updated_at: str


class OfferStatusUpdateRequest(BaseModel):
    status: Literal["accepted", "rejected"]


class OfferStatusUpdateResponse(BaseModel):
    """modified is false when the offer was already terminal (idempotent no-op)"""
    id: str
    status: str
    modified: bool
