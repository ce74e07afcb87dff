from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.enums import MembershipStatus


class MembershipTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_days: int = Field(..., gt=0)
    credit_amount: int = Field(0, ge=0)


class MembershipTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    duration_days: int
    credit_amount: int
    is_active: bool

    class Config:
        from_attributes = True


class MembershipAssignRequest(BaseModel):
    user_id: str
    membership_type_id: str


class MembershipResponse(BaseModel):
    id: str
    user_id: str
    membership_type: MembershipTypeResponse
    start_date: datetime
    end_date: datetime
    status: MembershipStatus

    class Config:
        from_attributes = True
