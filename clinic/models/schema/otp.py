from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text

from clinic.database import Base


class OtpChallengeEntry(Base):
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True)
    phone = Column(String(32), nullable=False)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_otp_phone_created_at", "phone", "created_at"),
        Index("ix_otp_expires_at", "expires_at"),
        # One unverified challenge per phone.
        Index(
            "uq_otp_unverified_phone",
            "phone",
            unique=True,
            sqlite_where=text("verified = 0"),
            postgresql_where=text("verified = false"),
        ),
    )
