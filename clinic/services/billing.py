from datetime import datetime, timezone
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from clinic.database import session_scope
from clinic.models.schema.billing import PackageEntry, PurchaseEntry
from clinic.schemas.billing import PurchaseCreate, PurchaseUpdate
from clinic.services.patients import patient_records
from clinic.services.records import (
    InvalidReferenceError,
    RecordConflictError,
    RecordNotFoundError,
    RecordStore,
)

LOGGER = logging.getLogger(__name__)

INVOICE_ATTEMPTS = 5

package_records = RecordStore(PackageEntry)
purchase_records = RecordStore(PurchaseEntry)


def next_invoice_number(now: Optional[datetime] = None) -> str:
    """Next number in the year's ``INV-{year}-{sequence}`` series, padded to 4 digits."""
    prefix = f"INV-{(now or datetime.now(timezone.utc)).year}-"
    column = PurchaseEntry.invoice_number
    with session_scope() as session:
        last = session.execute(
            select(column)
            .where(column.like(f"{prefix}%"))
            .order_by(func.length(column).desc(), column.desc())
            .limit(1)
        ).scalar_one_or_none()
    sequence = int(last[len(prefix):]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


class PurchaseService:
    def create(
        self, payload: PurchaseCreate, created_by: Optional[int] = None
    ) -> PurchaseEntry:
        if not patient_records.exists(payload.patient_id):
            raise InvalidReferenceError("Patient not found")
        package = package_records.get(payload.package_id)
        if package is None:
            raise InvalidReferenceError("Package not found")
        amount = payload.amount if payload.amount is not None else package.price
        for _ in range(INVOICE_ATTEMPTS):
            invoice_number = next_invoice_number()
            try:
                return purchase_records.create(
                    patient_id=payload.patient_id,
                    package_id=payload.package_id,
                    amount=amount,
                    status=payload.status.value,
                    payment_ref=payload.payment_ref,
                    invoice_number=invoice_number,
                    created_by=created_by,
                )
            except IntegrityError:
                LOGGER.warning("Invoice number %s was taken, retrying", invoice_number)
        raise RecordConflictError("Could not allocate an invoice number")

    def update(self, purchase_id: int, payload: PurchaseUpdate) -> PurchaseEntry:
        values = payload.model_dump(exclude_unset=True)
        if values.get("package_id") is not None:
            if not package_records.exists(values["package_id"]):
                raise InvalidReferenceError("Package not found")
        else:
            values.pop("package_id", None)
        if values.get("status") is not None:
            values["status"] = values["status"].value
        else:
            values.pop("status", None)
        if values.get("amount") is None:
            values.pop("amount", None)
        entry = purchase_records.update(purchase_id, **values)
        if entry is None:
            raise RecordNotFoundError("Purchase not found")
        return entry


purchase_service = PurchaseService()
