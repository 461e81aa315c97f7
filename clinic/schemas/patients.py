from datetime import datetime
import enum
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic.schemas.users import normalize_email
from clinic.services.otp import normalize_phone


class PatientSource(str, enum.Enum):
    KURUM_ZIYARET = "kurumZiyaret"
    INSTAGRAM = "instagram"
    GOOGLE_ADS = "googleAds"
    WEB_SITESI = "webSitesi"
    TAVSIYE = "tavsiye"
    DOKTOR_YONLENDIRMESI = "doktorYonlendirmesi"


class _PatientFields(BaseModel):
    @field_validator("phone", check_fields=False)
    @classmethod
    def clean_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = normalize_phone(value)
        if not re.fullmatch(r"\+?\d{7,15}", cleaned):
            raise ValueError("Geçerli bir telefon numarası girin")
        return cleaned

    @field_validator("email", check_fields=False)
    @classmethod
    def clean_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return normalize_email(value)

    @field_validator("tc_number", check_fields=False)
    @classmethod
    def clean_tc_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        cleaned = value.strip()
        if not re.fullmatch(r"\d{11}", cleaned):
            raise ValueError("TC kimlik numarası 11 haneli olmalıdır")
        return cleaned


class PatientCreate(_PatientFields):
    full_name: str = Field(min_length=1, max_length=120)
    tc_number: Optional[str] = None
    phone: str = Field(min_length=1, max_length=32)
    email: Optional[str] = None
    birth_date: Optional[str] = Field(default=None, max_length=10)
    gender: Optional[str] = Field(default=None, max_length=16)
    address: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class PatientUpdate(_PatientFields):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    tc_number: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1, max_length=32)
    email: Optional[str] = None
    birth_date: Optional[str] = Field(default=None, max_length=10)
    gender: Optional[str] = Field(default=None, max_length=16)
    address: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class PatientIntake(PatientCreate):
    source: PatientSource = PatientSource.KURUM_ZIYARET
    registration_notes: Optional[str] = None


class PatientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    tc_number: Optional[str] = None
    phone: str
    email: Optional[str] = None
    birth_date: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    registration_notes: Optional[str] = None
    registered_by: Optional[int] = None
    user_id: Optional[int] = None
    is_verified: bool = False
    created_at: datetime


class TherapistCreate(BaseModel):
    user_id: int
    title: str = Field(min_length=1, max_length=120)
    bio: Optional[str] = None


class TherapistUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=120)
    bio: Optional[str] = None


class TherapistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    bio: Optional[str] = None
    created_at: datetime
