from typing import Optional

from clinic.models.schema.patient import PatientEntry
from clinic.models.schema.therapist import TherapistEntry
from clinic.schemas.patients import (
    PatientCreate,
    PatientIntake,
    PatientUpdate,
    TherapistCreate,
    TherapistUpdate,
)
from clinic.schemas.users import Role
from clinic.services.records import (
    InvalidReferenceError,
    RecordConflictError,
    RecordNotFoundError,
    RecordStore,
)
from clinic.services.users import user_store

patient_records = RecordStore(PatientEntry)
therapist_records = RecordStore(TherapistEntry)


class PatientService:
    def create(
        self, payload: PatientCreate, registered_by: Optional[int] = None
    ) -> PatientEntry:
        self._ensure_phone_free(payload.phone)
        values = payload.model_dump()
        if isinstance(payload, PatientIntake):
            values["source"] = payload.source.value
        return patient_records.create(registered_by=registered_by, **values)

    def update(self, patient_id: int, payload: PatientUpdate) -> PatientEntry:
        values = payload.model_dump(exclude_unset=True)
        if values.get("phone"):
            self._ensure_phone_free(values["phone"], exclude_id=patient_id)
        elif "phone" in values:
            del values["phone"]
        if "full_name" in values and not values["full_name"]:
            del values["full_name"]
        entry = patient_records.update(patient_id, **values)
        if entry is None:
            raise RecordNotFoundError("Patient not found")
        return entry

    def for_user(self, user_id: int) -> Optional[PatientEntry]:
        return patient_records.find_one(user_id=user_id)

    def _ensure_phone_free(self, phone: str, exclude_id: Optional[int] = None) -> None:
        existing = patient_records.find_one(phone=phone)
        if existing is not None and existing.id != exclude_id:
            raise RecordConflictError("Bu telefon numarasıyla kayıtlı bir hasta zaten var")


class TherapistService:
    def create(self, payload: TherapistCreate) -> TherapistEntry:
        user = user_store.get_user(payload.user_id)
        if user is None or user.role != Role.THERAPIST.value:
            raise InvalidReferenceError("User is not a therapist")
        if therapist_records.find_one(user_id=payload.user_id) is not None:
            raise RecordConflictError("Therapist profile already exists for this user")
        return therapist_records.create(**payload.model_dump())

    def update(self, therapist_id: int, payload: TherapistUpdate) -> TherapistEntry:
        values = payload.model_dump(exclude_unset=True)
        if "title" in values and not values["title"]:
            del values["title"]
        entry = therapist_records.update(therapist_id, **values)
        if entry is None:
            raise RecordNotFoundError("Therapist not found")
        return entry

    def for_user(self, user_id: int) -> Optional[TherapistEntry]:
        return therapist_records.find_one(user_id=user_id)


patient_service = PatientService()
therapist_service = TherapistService()
