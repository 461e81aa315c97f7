from datetime import datetime
import enum
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic.schemas.users import normalize_email
from clinic.services.otp import normalize_phone


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def _clean_optional_email(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return normalize_email(value)


class AppointmentCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    phone: str = Field(min_length=7, max_length=32)
    email: Optional[str] = None
    service: str = Field(min_length=1, max_length=120)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(pattern=r"^\d{2}:\d{2}$")
    message: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, value: str) -> str:
        return normalize_phone(value)

    @field_validator("email")
    @classmethod
    def clean_email(cls, value: Optional[str]) -> Optional[str]:
        return _clean_optional_email(value)


class AppointmentUpdate(BaseModel):
    date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    service: Optional[str] = Field(default=None, min_length=1, max_length=120)
    message: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[AppointmentStatus] = None
    therapist_id: Optional[int] = None
    patient_id: Optional[int] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    email: Optional[str] = None
    service: str
    date: str
    time: str
    message: Optional[str] = None
    status: AppointmentStatus
    therapist_id: Optional[int] = None
    patient_id: Optional[int] = None
    created_at: datetime


class ContactMessageCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    phone: str = Field(min_length=7, max_length=32)
    email: Optional[str] = None
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, value: str) -> str:
        cleaned = normalize_phone(value)
        if not re.fullmatch(r"\+?\d{7,15}", cleaned):
            raise ValueError("Geçerli bir telefon numarası girin")
        return cleaned

    @field_validator("email")
    @classmethod
    def clean_email(cls, value: Optional[str]) -> Optional[str]:
        return _clean_optional_email(value)


class ContactMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    email: Optional[str] = None
    message: str
    created_at: datetime
