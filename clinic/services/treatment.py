from typing import Optional

from clinic.models.schema.treatment import SessionNoteEntry, TreatmentPlanEntry
from clinic.schemas.treatment import (
    SessionNoteCreate,
    SessionNoteUpdate,
    TreatmentPlanCreate,
    TreatmentPlanUpdate,
)
from clinic.services.content import appointment_records
from clinic.services.patients import patient_records, therapist_records
from clinic.services.records import (
    InvalidReferenceError,
    RecordNotFoundError,
    RecordStore,
)

treatment_plan_records = RecordStore(TreatmentPlanEntry)
session_note_records = RecordStore(SessionNoteEntry)


class TreatmentPlanService:
    def create(self, payload: TreatmentPlanCreate) -> TreatmentPlanEntry:
        if not patient_records.exists(payload.patient_id):
            raise InvalidReferenceError("Patient not found")
        if not therapist_records.exists(payload.therapist_id):
            raise InvalidReferenceError("Therapist not found")
        return treatment_plan_records.create(**payload.model_dump())

    def update(self, plan_id: int, payload: TreatmentPlanUpdate) -> TreatmentPlanEntry:
        plan = treatment_plan_records.get(plan_id)
        if plan is None:
            raise RecordNotFoundError("Treatment plan not found")
        values = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        if "therapist_id" in values and not therapist_records.exists(
            values["therapist_id"]
        ):
            raise InvalidReferenceError("Therapist not found")
        total = values.get("total_sessions", plan.total_sessions)
        completed = values.get("completed_sessions", plan.completed_sessions)
        if completed > total:
            raise ValueError("Tamamlanan seans sayısı toplamı aşamaz")
        return treatment_plan_records.update(plan_id, **values)


class SessionNoteService:
    def create(
        self, payload: SessionNoteCreate, therapist_id: Optional[int] = None
    ) -> SessionNoteEntry:
        if not appointment_records.exists(payload.appointment_id):
            raise InvalidReferenceError("Appointment not found")
        therapist_id = therapist_id or payload.therapist_id
        if not therapist_records.exists(therapist_id):
            raise InvalidReferenceError("Therapist not found")
        return session_note_records.create(
            appointment_id=payload.appointment_id,
            therapist_id=therapist_id,
            note_text=payload.note_text,
            pain_scale=payload.pain_scale,
        )

    def update(self, note_id: int, payload: SessionNoteUpdate) -> SessionNoteEntry:
        values = payload.model_dump(exclude_unset=True)
        if "note_text" in values and not values["note_text"]:
            del values["note_text"]
        entry = session_note_records.update(note_id, **values)
        if entry is None:
            raise RecordNotFoundError("Session note not found")
        return entry


treatment_plan_service = TreatmentPlanService()
session_note_service = SessionNoteService()
