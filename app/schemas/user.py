from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional, Literal


class UserCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    name: Optional[str] = None
    photo_url: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: str
    is_fraud: bool
    created_at: str


class UserRegisterResponse(BaseModel):
    message: str
    created: bool
    user: UserResponse


class RoleResponse(BaseModel):
    role: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: Literal["buyer", "agent", "admin"]
