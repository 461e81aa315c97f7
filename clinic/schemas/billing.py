from datetime import datetime
import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUND = "REFUND"


class PackageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    session_count: int = Field(ge=1)
    price: int = Field(ge=0, description="Price in kuruş")
    is_active: bool = True


class PackageUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    session_count: Optional[int] = Field(default=None, ge=1)
    price: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class PackageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    session_count: int
    price: int
    is_active: bool
    created_at: datetime


class PurchaseCreate(BaseModel):
    patient_id: int
    package_id: int
    amount: Optional[int] = Field(default=None, ge=0)
    status: PurchaseStatus = PurchaseStatus.PENDING
    payment_ref: Optional[str] = Field(default=None, max_length=120)


class PurchaseUpdate(BaseModel):
    package_id: Optional[int] = None
    amount: Optional[int] = Field(default=None, ge=0)
    status: Optional[PurchaseStatus] = None
    payment_ref: Optional[str] = Field(default=None, max_length=120)


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    package_id: int
    amount: int
    status: PurchaseStatus
    payment_ref: Optional[str] = None
    invoice_number: str
    created_by: Optional[int] = None
    created_at: datetime
