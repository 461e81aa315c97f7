from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from clinic.database import Base, utcnow


class TherapistEntry(Base):
    __tablename__ = "therapists"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    title = Column(String(120), nullable=False)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
