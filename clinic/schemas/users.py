import enum
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Role(str, enum.Enum):
    ADMIN = "admin"
    THERAPIST = "therapist"
    RECEPTIONIST = "receptionist"
    PATIENT = "patient"


STAFF_ROLES = (Role.ADMIN, Role.THERAPIST, Role.RECEPTIONIST)


def normalize_email(value: str) -> str:
    cleaned = value.strip().lower()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValueError("Geçerli bir email adresi girin")
    return cleaned


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=128)
    role: Role = Role.THERAPIST
    phone: Optional[str] = Field(default=None, max_length=32)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 3:
            raise ValueError("Kullanıcı adı en az 3 karakter olmalıdır")
        return cleaned

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("role")
    @classmethod
    def staff_only(cls, value: Role) -> Role:
        if value not in STAFF_ROLES:
            raise ValueError("Hasta hesapları telefon doğrulamasıyla oluşturulur")
        return value


class UserUpdate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)
    role: Optional[Role] = None
    phone: Optional[str] = Field(default=None, max_length=32)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_email(value)

    @field_validator("role")
    @classmethod
    def staff_only(cls, value: Optional[Role]) -> Optional[Role]:
        if value is not None and value not in STAFF_ROLES:
            raise ValueError("Hasta hesapları telefon doğrulamasıyla oluşturulur")
        return value


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    phone: Optional[str] = None
    role: Role
    is_verified: bool = False
    created_at: datetime


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)


class SetupRequest(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in_seconds: int
    refresh_expires_in_seconds: int
