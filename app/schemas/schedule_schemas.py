from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime

from app.enums import SessionStatus


class ServiceTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    duration_minutes: int = Field(60, gt=0, le=480)
    credit_cost: int = Field(1, ge=0)
    default_capacity: int = Field(1, gt=0)
    is_private: bool = False


class ServiceTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    duration_minutes: int
    credit_cost: int
    default_capacity: int
    is_private: bool
    is_active: bool

    class Config:
        from_attributes = True


class ClassCreate(BaseModel):
    service_type_id: Optional[str] = None
    name: Optional[str] = Field(None, max_length=150)
    instructor_id: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    capacity: Optional[int] = Field(None, gt=0)
    credit_cost: Optional[int] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=150)

    @validator("name", always=True)
    def name_or_service_type(cls, v, values):
        if not v and not values.get("service_type_id"):
            raise ValueError("Either name or service_type_id is required")
        return v


class ClassResponse(BaseModel):
    id: str
    name: str
    service_type_id: Optional[str] = None
    instructor_id: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    capacity: int
    booked_count: int
    spots_left: int
    credit_cost: int
    location: Optional[str] = None
    status: SessionStatus

    class Config:
        from_attributes = True


class ClassCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ClassCancelResponse(BaseModel):
    class_id: str
    cancelled_bookings: int
    credits_refunded: int


class ClassAvailabilityResponse(BaseModel):
    class_id: str
    name: str
    capacity: int
    booked_count: int
    spots_left: int
    status: SessionStatus
    starts_at: datetime


class PrivateSessionCreate(BaseModel):
    trainer_id: Optional[str] = None
    service_type_id: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    credit_cost: Optional[int] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=150)
    notes: Optional[str] = None


class PrivateSessionResponse(BaseModel):
    id: str
    trainer_id: str
    client_id: Optional[str] = None
    service_type_id: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    credit_cost: int
    location: Optional[str] = None
    notes: Optional[str] = None
    status: SessionStatus
    is_open: bool

    class Config:
        from_attributes = True


class ScheduleEventsResponse(BaseModel):
    classes: List[ClassResponse]
    private_sessions: List[PrivateSessionResponse]


class PrivateSessionCancelResponse(BaseModel):
    session_id: str
    cancelled_bookings: int
    credits_refunded: int
