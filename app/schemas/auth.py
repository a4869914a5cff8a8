from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional


class TokenRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    name: Optional[str] = None
    photo_url: Optional[str] = None


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
