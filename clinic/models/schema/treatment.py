from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from clinic.database import Base, utcnow


class TreatmentPlanEntry(Base):
    __tablename__ = "treatment_plans"

    id = Column(Integer, primary_key=True)
    patient_id = Column(
        Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    therapist_id = Column(
        Integer, ForeignKey("therapists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    total_sessions = Column(Integer, nullable=False)
    completed_sessions = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class SessionNoteEntry(Base):
    __tablename__ = "session_notes"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    therapist_id = Column(
        Integer, ForeignKey("therapists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    note_text = Column(Text, nullable=False)
    pain_scale = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
