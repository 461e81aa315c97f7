from fastapi import APIRouter, Depends, Query, status

from clinic.middlewares.roles import STAFF, CurrentUser, require_roles
from clinic.routers.errors import http_error, not_found
from clinic.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from clinic.services.content import (
    appointment_records,
    link_appointment_patient,
    update_appointment,
)
from clinic.services.records import InvalidReferenceError, RecordNotFoundError

router = APIRouter(prefix="/appointments", tags=["appointments"])

staff_only = Depends(require_roles(*STAFF))


@router.post(
    "", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED
)
def create_appointment(payload: AppointmentCreate) -> AppointmentResponse:
    values = link_appointment_patient(payload.model_dump())
    entry = appointment_records.create(status=AppointmentStatus.PENDING.value, **values)
    return AppointmentResponse.model_validate(entry)


@router.get("", response_model=list[AppointmentResponse])
def list_appointments(
    status_filter: AppointmentStatus | None = Query(default=None, alias="status"),
    _: CurrentUser = staff_only,
) -> list[AppointmentResponse]:
    filters = {"status": status_filter.value} if status_filter else {}
    return [
        AppointmentResponse.model_validate(entry)
        for entry in appointment_records.list(**filters)
    ]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int, _: CurrentUser = staff_only
) -> AppointmentResponse:
    entry = appointment_records.get(appointment_id)
    if entry is None:
        raise not_found("Appointment")
    return AppointmentResponse.model_validate(entry)


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
def set_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    _: CurrentUser = staff_only,
) -> AppointmentResponse:
    entry = appointment_records.update(appointment_id, status=payload.status.value)
    if entry is None:
        raise not_found("Appointment")
    return AppointmentResponse.model_validate(entry)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
def edit_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    _: CurrentUser = staff_only,
) -> AppointmentResponse:
    try:
        entry = update_appointment(appointment_id, payload)
    except (InvalidReferenceError, RecordNotFoundError) as exc:
        raise http_error(exc) from exc
    return AppointmentResponse.model_validate(entry)


@router.delete("/{appointment_id}")
def delete_appointment(appointment_id: int, _: CurrentUser = staff_only) -> dict:
    if not appointment_records.delete(appointment_id):
        raise not_found("Appointment")
    return {"message": "Randevu silindi"}
