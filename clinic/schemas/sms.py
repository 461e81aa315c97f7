from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SmsSettingCreate(BaseModel):
    provider: Literal["twilio", "other"] = "twilio"
    account_sid: str = Field(min_length=1, max_length=128)
    auth_token: str = Field(min_length=1, max_length=128)
    phone_number: str = Field(min_length=1, max_length=32)
    is_active: bool = True


class SmsSettingUpdate(BaseModel):
    provider: Optional[Literal["twilio", "other"]] = None
    account_sid: Optional[str] = Field(default=None, min_length=1, max_length=128)
    auth_token: Optional[str] = Field(default=None, min_length=1, max_length=128)
    phone_number: Optional[str] = Field(default=None, min_length=1, max_length=32)
    is_active: Optional[bool] = None


class SmsSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider: str
    account_sid: str
    auth_token: str
    phone_number: str
    is_active: bool
    updated_at: datetime

    @field_validator("auth_token")
    @classmethod
    def mask_token(cls, value: str) -> str:
        if len(value) <= 4:
            return "****"
        return f"{'*' * (len(value) - 4)}{value[-4:]}"
