from sqlalchemy import or_, select

from clinic.database import session_scope
from clinic.models.schema.appointment import AppointmentEntry
from clinic.models.schema.content import (
    BlogPostEntry,
    ContactMessageEntry,
    TestimonialEntry,
)
from clinic.schemas.appointments import AppointmentUpdate
from clinic.schemas.content import BlogPostCreate
from clinic.services.patients import patient_records, therapist_records
from clinic.services.records import (
    InvalidReferenceError,
    RecordNotFoundError,
    RecordStore,
)

appointment_records = RecordStore(AppointmentEntry)
contact_records = RecordStore(ContactMessageEntry)
blog_records = RecordStore(BlogPostEntry, order_by="published_at")
testimonial_records = RecordStore(TestimonialEntry)


def create_blog_post(payload: BlogPostCreate) -> BlogPostEntry:
    values = payload.model_dump()
    if values["published_at"] is None:
        del values["published_at"]
    return blog_records.create(**values)


def update_appointment(appointment_id: int, payload: AppointmentUpdate) -> AppointmentEntry:
    values = payload.model_dump(exclude_unset=True)
    for field in ("date", "time", "service", "status"):
        if field in values and values[field] is None:
            del values[field]
    if "status" in values:
        values["status"] = values["status"].value
    if values.get("therapist_id") is not None and not therapist_records.exists(
        values["therapist_id"]
    ):
        raise InvalidReferenceError("Therapist not found")
    if values.get("patient_id") is not None and not patient_records.exists(
        values["patient_id"]
    ):
        raise InvalidReferenceError("Patient not found")
    entry = appointment_records.update(appointment_id, **values)
    if entry is None:
        raise RecordNotFoundError("Appointment not found")
    return entry


def link_appointment_patient(values: dict) -> dict:
    """Attach a known patient to a public booking made with their phone."""
    patient = patient_records.find_one(phone=values["phone"])
    if patient is not None:
        values["patient_id"] = patient.id
    return values


def appointments_for_patient(patient_id: int, phone: str) -> list[AppointmentEntry]:
    stmt = (
        select(AppointmentEntry)
        .where(
            or_(
                AppointmentEntry.patient_id == patient_id,
                AppointmentEntry.phone == phone,
            )
        )
        .order_by(AppointmentEntry.created_at.desc(), AppointmentEntry.id.desc())
    )
    with session_scope() as session:
        return list(session.execute(stmt).scalars().all())
