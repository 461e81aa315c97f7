from sqlalchemy import Boolean, Column, DateTime, Integer, String

from clinic.database import Base, utcnow


class SmsSettingEntry(Base):
    __tablename__ = "sms_settings"

    id = Column(Integer, primary_key=True)
    provider = Column(String(16), nullable=False, default="twilio")
    account_sid = Column(String(128), nullable=False)
    auth_token = Column(String(128), nullable=False)
    phone_number = Column(String(32), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
