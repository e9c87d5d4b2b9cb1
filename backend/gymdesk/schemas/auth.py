from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class AuthResponse(BaseModel):
    message: str
    csrf_token: Optional[str] = None


class UserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    first_name: str
    last_name: str
    role: str
    tenant_id: Optional[int] = None
    branch_id: Optional[int] = None
    is_active: bool
