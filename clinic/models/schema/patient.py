from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from clinic.database import Base, utcnow


class PatientEntry(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    full_name = Column(String(120), nullable=False)
    tc_number = Column(String(11), nullable=True)
    phone = Column(String(32), nullable=False, unique=True)
    email = Column(String(255), nullable=True)
    birth_date = Column(String(10), nullable=True)
    gender = Column(String(16), nullable=True)
    address = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    source = Column(String(32), nullable=True)
    registration_notes = Column(Text, nullable=True)
    registered_by = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
