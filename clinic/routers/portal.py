from fastapi import APIRouter, Depends, HTTPException, status

from clinic.middlewares.roles import CurrentUser, require_roles
from clinic.models.schema.patient import PatientEntry
from clinic.models.schema.therapist import TherapistEntry
from clinic.routers.errors import http_error
from clinic.schemas.appointments import AppointmentResponse
from clinic.schemas.billing import PurchaseResponse
from clinic.schemas.patients import PatientResponse
from clinic.schemas.treatment import (
    SessionNoteCreate,
    SessionNoteResponse,
    TreatmentPlanResponse,
)
from clinic.schemas.users import Role
from clinic.services.billing import purchase_records
from clinic.services.content import appointment_records, appointments_for_patient
from clinic.services.patients import patient_records, patient_service, therapist_service
from clinic.services.treatment import (
    session_note_records,
    session_note_service,
    treatment_plan_records,
)

router = APIRouter(tags=["portal"])


def current_patient(
    user: CurrentUser = Depends(require_roles(Role.PATIENT)),
) -> PatientEntry:
    patient = patient_service.for_user(user.id)
    if patient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Hasta kaydı bulunamadı",
        )
    return patient


def current_therapist(
    user: CurrentUser = Depends(require_roles(Role.THERAPIST)),
) -> TherapistEntry:
    therapist = therapist_service.for_user(user.id)
    if therapist is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Terapist profili bulunamadı",
        )
    return therapist


@router.get("/patient/profile", response_model=PatientResponse)
def patient_profile(patient: PatientEntry = Depends(current_patient)) -> PatientResponse:
    return PatientResponse.model_validate(patient)


@router.get("/patient/appointments", response_model=list[AppointmentResponse])
def patient_appointments(
    patient: PatientEntry = Depends(current_patient),
) -> list[AppointmentResponse]:
    return [
        AppointmentResponse.model_validate(entry)
        for entry in appointments_for_patient(patient.id, patient.phone)
    ]


@router.get("/patient/treatment-plans", response_model=list[TreatmentPlanResponse])
def patient_treatment_plans(
    patient: PatientEntry = Depends(current_patient),
) -> list[TreatmentPlanResponse]:
    return [
        TreatmentPlanResponse.model_validate(plan)
        for plan in treatment_plan_records.list(patient_id=patient.id)
    ]


@router.get("/patient/purchases", response_model=list[PurchaseResponse])
def patient_purchases(
    patient: PatientEntry = Depends(current_patient),
) -> list[PurchaseResponse]:
    return [
        PurchaseResponse.model_validate(purchase)
        for purchase in purchase_records.list(patient_id=patient.id)
    ]


@router.get("/therapist/appointments", response_model=list[AppointmentResponse])
def therapist_appointments(
    therapist: TherapistEntry = Depends(current_therapist),
) -> list[AppointmentResponse]:
    return [
        AppointmentResponse.model_validate(entry)
        for entry in appointment_records.list(therapist_id=therapist.id)
    ]


@router.get("/therapist/patients", response_model=list[PatientResponse])
def therapist_patients(
    therapist: TherapistEntry = Depends(current_therapist),
) -> list[PatientResponse]:
    plans = treatment_plan_records.list(therapist_id=therapist.id)
    patient_ids = sorted({plan.patient_id for plan in plans})
    if not patient_ids:
        return []
    return [
        PatientResponse.model_validate(patient)
        for patient in patient_records.list(id=patient_ids)
    ]


@router.get("/therapist/session-notes", response_model=list[SessionNoteResponse])
def therapist_session_notes(
    therapist: TherapistEntry = Depends(current_therapist),
) -> list[SessionNoteResponse]:
    return [
        SessionNoteResponse.model_validate(note)
        for note in session_note_records.list(therapist_id=therapist.id)
    ]


@router.post(
    "/therapist/session-notes",
    response_model=SessionNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_therapist_session_note(
    payload: SessionNoteCreate,
    therapist: TherapistEntry = Depends(current_therapist),
) -> SessionNoteResponse:
    try:
        note = session_note_service.create(payload, therapist_id=therapist.id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return SessionNoteResponse.model_validate(note)
