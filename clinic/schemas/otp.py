from typing import Optional

from pydantic import BaseModel, Field, field_validator

from clinic.services.otp import OtpOutcome


class OtpRequest(BaseModel):
    phone: str = Field(min_length=7, max_length=32)


class OtpResponse(BaseModel):
    success: bool
    message: str
    outcome: OtpOutcome
    expires_in_seconds: Optional[int] = None


class OtpVerifyRequest(BaseModel):
    phone: str = Field(min_length=7, max_length=32)
    code: str = Field(min_length=1, max_length=12)

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str) -> str:
        return value.strip()


class OtpVerifyResponse(BaseModel):
    success: bool
    message: str
    outcome: OtpOutcome
    remaining_attempts: Optional[int] = None
    user_id: Optional[int] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in_seconds: Optional[int] = None
    refresh_expires_in_seconds: Optional[int] = None
