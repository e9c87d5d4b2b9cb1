from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CreateMemberRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(default=None, max_length=50)
    branch_id: Optional[int] = None
    plan_id: Optional[int] = None
    tenant_id: Optional[int] = Field(default=None, description="Super admins only")


class RenewRequest(BaseModel):
    plan_id: int


class MemberActionRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)


class CancelSubscriptionRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    branch_id: Optional[int] = None
    customer_id: int
    membership_plan_id: int
    status: str
    start_date: datetime
    end_date: datetime
    price: int
    currency: str
    auto_renew: bool
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: Optional[int] = None
    branch_id: Optional[int] = None
    email: Optional[str] = None
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    is_active: bool
    deleted_at: Optional[datetime] = None


class MemberStateOut(BaseModel):
    member_id: int
    state: str
    current_subscription: Optional[SubscriptionOut] = None


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    previous_state: Optional[str] = None
    new_state: Optional[str] = None
    performed_by: Optional[int] = None
    details: Optional[dict] = None
    created_at: Optional[datetime] = None
