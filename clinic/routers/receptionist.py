from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import FRONT_DESK, CurrentUser, require_roles
from clinic.routers.errors import http_error
from clinic.schemas.billing import PurchaseResponse
from clinic.schemas.patients import PatientIntake, PatientResponse
from clinic.schemas.reports import FunnelSummary
from clinic.services.patients import patient_records, patient_service
from clinic.services.reports import funnel_summary, registrations_for, transactions_for

router = APIRouter(prefix="/receptionist", tags=["receptionist"])

front_desk = Depends(require_roles(*FRONT_DESK))


@router.get("/patients", response_model=list[PatientResponse])
def list_patients(_: CurrentUser = front_desk) -> list[PatientResponse]:
    return [PatientResponse.model_validate(p) for p in patient_records.list()]


@router.post(
    "/patients", response_model=PatientResponse, status_code=status.HTTP_201_CREATED
)
def register_patient(
    payload: PatientIntake, current: CurrentUser = front_desk
) -> PatientResponse:
    try:
        patient = patient_service.create(payload, registered_by=current.id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return PatientResponse.model_validate(patient)


@router.get("/registrations", response_model=list[PatientResponse])
def my_registrations(current: CurrentUser = front_desk) -> list[PatientResponse]:
    return [PatientResponse.model_validate(p) for p in registrations_for(current.id)]


@router.get("/transactions", response_model=list[PurchaseResponse])
def my_transactions(current: CurrentUser = front_desk) -> list[PurchaseResponse]:
    return [PurchaseResponse.model_validate(p) for p in transactions_for(current.id)]


@router.get("/summary", response_model=FunnelSummary)
def my_summary(current: CurrentUser = front_desk) -> FunnelSummary:
    return funnel_summary(current.id)
