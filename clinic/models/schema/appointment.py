from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from clinic.database import Base, utcnow


class AppointmentEntry(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    service = Column(String(120), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    message = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    therapist_id = Column(
        Integer, ForeignKey("therapists.id", ondelete="SET NULL"), nullable=True, index=True
    )
    patient_id = Column(
        Integer, ForeignKey("patients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
