from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    agent_email: str
    agent_name: Optional[str] = None
    title: str
    location: str
    image: Optional[str] = None
    price_min: Optional[str] = None
    price_max: Optional[str] = None
    status: str
    advertised: bool
    created_at: str
    updated_at: str


class PropertyCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    image: Optional[str] = None
    agent_name: Optional[str] = None
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, ge=0)


class PropertyUpdateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, ge=0)


class PaginatedPropertiesResponse(BaseModel):
    items: List[PropertyResponse]
    total: int
    page: int
    page_size: int


class PropertyStatusUpdateResponse(BaseModel):
    """Outcome of a state-machine transition; modified is false for an idempotent replay"""
    id: str
    status: str
    modified: bool


class PropertyAdvertiseResponse(BaseModel):
    id: str
    advertised: bool
    modified: bool
