from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessCheckRequest(BaseModel):
    card_uid: str = Field(min_length=1, max_length=128)


class AccessCheckResponse(BaseModel):
    result: str
    member_name: Optional[str] = None
    expires_at: Optional[str] = None


class PendingAssignmentRequest(BaseModel):
    branch_id: int
    member_id: int
    purpose: Literal["ONBOARD", "REPLACE"] = "ONBOARD"
    old_card_uid: Optional[str] = Field(default=None, max_length=64)


class PendingAssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    member_id: int
    purpose: str
    old_card_uid: Optional[str] = None
    expires_at: datetime


class TerminalCreateRequest(BaseModel):
    branch_id: int
    name: str = Field(min_length=1, max_length=255)


class TerminalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    name: str
    is_active: bool
    last_seen_at: Optional[datetime] = None


class TerminalCreated(TerminalOut):
    secret: str


class AccessEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    terminal_id: Optional[int] = None
    event_type: str
    card_uid: Optional[str] = None
    member_id: Optional[int] = None
    actor_user_id: Optional[int] = None
    details: Optional[dict] = None
    created_at: Optional[datetime] = None


class InventoryCreateRequest(BaseModel):
    branch_id: int
    uids: list[str] = Field(min_length=1, max_length=1000)
    batch_id: Optional[str] = Field(default=None, max_length=100)


class InventoryCreateResult(BaseModel):
    requested: int
    created: int
    skipped: list[str]
    batch_id: Optional[str] = None


class InventoryCardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    allocated_branch_id: Optional[int] = None
    status: str
    batch_id: Optional[str] = None
    created_at: Optional[datetime] = None


class InventoryMoveRequest(BaseModel):
    from_branch_id: int
    to_branch_id: int
    uid: Optional[str] = Field(default=None, max_length=64)
    batch_id: Optional[str] = Field(default=None, max_length=100)


class InventoryMoveResult(BaseModel):
    moved: int
    from_branch_id: int
    to_branch_id: int
    uid: Optional[str] = None
    batch_id: Optional[str] = None


class InventoryBatchStatusRequest(BaseModel):
    branch_id: int
    batch_id: str = Field(min_length=1, max_length=100)
    status: Literal["AVAILABLE", "DISABLED"]
