from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class ReviewCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    property_id: str
    property_title: Optional[str] = None
    reviewer_email: EmailStr
    reviewer_name: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: str
    property_id: str
    property_title: Optional[str] = None
    reviewer_email: str
    reviewer_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: str
