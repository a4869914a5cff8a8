from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class ReportCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    property_id: str
    property_title: Optional[str] = None
    reporter_email: EmailStr
    reason: str = Field(..., min_length=1)


class ReportResponse(BaseModel):
    id: str
    property_id: str
    property_title: Optional[str] = None
    reporter_email: str
    reason: str
    created_at: str
