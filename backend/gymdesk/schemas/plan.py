from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: int = Field(ge=0)
    duration: int = Field(ge=1, description="Length in days")
    plan_type: str = Field(default="MONTHLY", max_length=50)
    is_active: bool = True
    tenant_id: Optional[int] = Field(default=None, description="Super admins only")


class PlanUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[int] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=1)
    plan_type: Optional[str] = Field(default=None, max_length=50)


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    name: str
    description: Optional[str] = None
    price: int
    duration: int
    plan_type: str
    is_active: bool
    created_at: Optional[datetime] = None
