from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime

from app.enums import CreditSource, CreditStatus, CreditOperation, RelatedEntityType
from app.utils.dates import to_naive_utc


class CreditGrantRequest(BaseModel):
    user_id: str
    amount: int = Field(..., gt=0, le=1000)
    source: CreditSource = CreditSource.ADMIN
    expiry_date: Optional[datetime] = None
    note: Optional[str] = Field(None, max_length=500)

    @validator("expiry_date")
    def normalise_expiry(cls, v):
        return to_naive_utc(v) if v else v


class CreditEntryResponse(BaseModel):
    id: str
    amount: int
    remaining_amount: int
    expiry_date: Optional[datetime] = None
    source: CreditSource
    source_id: Optional[str] = None
    status: CreditStatus
    created_at: datetime

    class Config:
        from_attributes = True


class CreditLogResponse(BaseModel):
    id: str
    credit_id: str
    amount: int
    operation: CreditOperation
    related_entity_type: Optional[RelatedEntityType] = None
    related_entity_id: Optional[str] = None
    booking_id: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CreditBalanceResponse(BaseModel):
    user_id: str
    balance: int
    next_expiry: Optional[datetime] = None


class UserCreditsResponse(BaseModel):
    user_id: str
    balance: int
    entries: List[CreditEntryResponse]
    history: List[CreditLogResponse]


class CreditPackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    credits: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    validity_days: int = Field(90, gt=0)
    is_best_value: bool = False


class CreditPackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    credits: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    validity_days: Optional[int] = Field(None, gt=0)
    is_best_value: Optional[bool] = None
    is_active: Optional[bool] = None


class CreditPackageResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    credits: int
    price: float
    validity_days: int
    is_best_value: bool
    is_active: bool

    class Config:
        from_attributes = True


class PackageAssignRequest(BaseModel):
    user_id: str
