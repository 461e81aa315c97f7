from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import (
    ADMIN_ONLY,
    FRONT_DESK,
    STAFF,
    CurrentUser,
    require_roles,
)
from clinic.routers.errors import http_error, not_found
from clinic.schemas.patients import (
    PatientCreate,
    PatientResponse,
    PatientUpdate,
    TherapistCreate,
    TherapistResponse,
    TherapistUpdate,
)
from clinic.services.patients import (
    patient_records,
    patient_service,
    therapist_records,
    therapist_service,
)

router = APIRouter(tags=["patients"])


@router.get("/patients", response_model=list[PatientResponse])
def list_patients(
    _: CurrentUser = Depends(require_roles(*STAFF)),
) -> list[PatientResponse]:
    return [PatientResponse.model_validate(p) for p in patient_records.list()]


@router.get("/patients/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: int, _: CurrentUser = Depends(require_roles(*STAFF))
) -> PatientResponse:
    patient = patient_records.get(patient_id)
    if patient is None:
        raise not_found("Patient")
    return PatientResponse.model_validate(patient)


@router.post(
    "/patients", response_model=PatientResponse, status_code=status.HTTP_201_CREATED
)
def create_patient(
    payload: PatientCreate, current: CurrentUser = Depends(require_roles(*FRONT_DESK))
) -> PatientResponse:
    try:
        patient = patient_service.create(payload, registered_by=current.id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return PatientResponse.model_validate(patient)


@router.patch("/patients/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    _: CurrentUser = Depends(require_roles(*FRONT_DESK)),
) -> PatientResponse:
    try:
        patient = patient_service.update(patient_id, payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return PatientResponse.model_validate(patient)


@router.delete("/patients/{patient_id}")
def delete_patient(
    patient_id: int, _: CurrentUser = Depends(require_roles(*FRONT_DESK))
) -> dict:
    if not patient_records.delete(patient_id):
        raise not_found("Patient")
    return {"message": "Hasta silindi"}


@router.get("/therapists", response_model=list[TherapistResponse])
def list_therapists(
    _: CurrentUser = Depends(require_roles(*STAFF)),
) -> list[TherapistResponse]:
    return [TherapistResponse.model_validate(t) for t in therapist_records.list()]


@router.get("/therapists/{therapist_id}", response_model=TherapistResponse)
def get_therapist(
    therapist_id: int, _: CurrentUser = Depends(require_roles(*STAFF))
) -> TherapistResponse:
    therapist = therapist_records.get(therapist_id)
    if therapist is None:
        raise not_found("Therapist")
    return TherapistResponse.model_validate(therapist)


@router.post(
    "/therapists",
    response_model=TherapistResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_therapist(
    payload: TherapistCreate, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> TherapistResponse:
    try:
        therapist = therapist_service.create(payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return TherapistResponse.model_validate(therapist)


@router.patch("/therapists/{therapist_id}", response_model=TherapistResponse)
def update_therapist(
    therapist_id: int,
    payload: TherapistUpdate,
    _: CurrentUser = Depends(require_roles(*ADMIN_ONLY)),
) -> TherapistResponse:
    try:
        therapist = therapist_service.update(therapist_id, payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return TherapistResponse.model_validate(therapist)


@router.delete("/therapists/{therapist_id}")
def delete_therapist(
    therapist_id: int, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> dict:
    if not therapist_records.delete(therapist_id):
        raise not_found("Therapist")
    return {"message": "Terapist silindi"}
