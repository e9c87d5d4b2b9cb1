from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TenantCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=2, max_length=100, pattern=r"^[a-zA-Z0-9-]+$")
    email: Optional[EmailStr] = None


class TenantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    category: str
    email: Optional[str] = None
    is_active: bool


class BranchCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    tenant_id: Optional[int] = Field(default=None, description="Super admins only")


class BranchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    name: str
    address: Optional[str] = None
    is_active: bool


class StaffCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Literal["OWNER", "MANAGER", "STAFF"]
    branch_ids: list[int] = Field(default_factory=list)
    tenant_id: Optional[int] = Field(default=None, description="Super admins only")


class StaffOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: Optional[int] = None
    email: Optional[str] = None
    first_name: str
    last_name: str
    role: str
    is_active: bool
