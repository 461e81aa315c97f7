from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from clinic.database import Base, utcnow


class PackageEntry(Base):
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    session_count = Column(Integer, nullable=False)
    # Amounts are kept in kuruş.
    price = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class PurchaseEntry(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True)
    patient_id = Column(
        Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    package_id = Column(
        Integer, ForeignKey("packages.id", ondelete="RESTRICT"), nullable=False
    )
    amount = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="PENDING")
    payment_ref = Column(String(120), nullable=True)
    invoice_number = Column(String(32), nullable=False, unique=True)
    created_by = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
