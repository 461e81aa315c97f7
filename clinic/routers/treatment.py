from typing import Optional

from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import CLINICAL, STAFF, CurrentUser, require_roles
from clinic.routers.errors import http_error, not_found
from clinic.schemas.treatment import (
    SessionNoteCreate,
    SessionNoteResponse,
    SessionNoteUpdate,
    TreatmentPlanCreate,
    TreatmentPlanResponse,
    TreatmentPlanUpdate,
)
from clinic.services.treatment import (
    session_note_records,
    session_note_service,
    treatment_plan_records,
    treatment_plan_service,
)

router = APIRouter(tags=["treatment"])

clinical = Depends(require_roles(*CLINICAL))


@router.get("/treatment-plans", response_model=list[TreatmentPlanResponse])
def list_treatment_plans(
    patient_id: Optional[int] = None,
    _: CurrentUser = Depends(require_roles(*STAFF)),
) -> list[TreatmentPlanResponse]:
    filters = {"patient_id": patient_id} if patient_id is not None else {}
    return [
        TreatmentPlanResponse.model_validate(plan)
        for plan in treatment_plan_records.list(**filters)
    ]


@router.get("/treatment-plans/{plan_id}", response_model=TreatmentPlanResponse)
def get_treatment_plan(
    plan_id: int, _: CurrentUser = Depends(require_roles(*STAFF))
) -> TreatmentPlanResponse:
    plan = treatment_plan_records.get(plan_id)
    if plan is None:
        raise not_found("Treatment plan")
    return TreatmentPlanResponse.model_validate(plan)


@router.post(
    "/treatment-plans",
    response_model=TreatmentPlanResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_treatment_plan(
    payload: TreatmentPlanCreate, _: CurrentUser = clinical
) -> TreatmentPlanResponse:
    try:
        plan = treatment_plan_service.create(payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return TreatmentPlanResponse.model_validate(plan)


@router.patch("/treatment-plans/{plan_id}", response_model=TreatmentPlanResponse)
def update_treatment_plan(
    plan_id: int, payload: TreatmentPlanUpdate, _: CurrentUser = clinical
) -> TreatmentPlanResponse:
    try:
        plan = treatment_plan_service.update(plan_id, payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return TreatmentPlanResponse.model_validate(plan)


@router.delete("/treatment-plans/{plan_id}")
def delete_treatment_plan(plan_id: int, _: CurrentUser = clinical) -> dict:
    if not treatment_plan_records.delete(plan_id):
        raise not_found("Treatment plan")
    return {"message": "Tedavi planı silindi"}


@router.get("/session-notes", response_model=list[SessionNoteResponse])
def list_session_notes(
    appointment_id: Optional[int] = None, _: CurrentUser = clinical
) -> list[SessionNoteResponse]:
    filters = {"appointment_id": appointment_id} if appointment_id is not None else {}
    return [
        SessionNoteResponse.model_validate(note)
        for note in session_note_records.list(**filters)
    ]


@router.post(
    "/session-notes",
    response_model=SessionNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_session_note(
    payload: SessionNoteCreate, _: CurrentUser = clinical
) -> SessionNoteResponse:
    try:
        note = session_note_service.create(payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return SessionNoteResponse.model_validate(note)


@router.patch("/session-notes/{note_id}", response_model=SessionNoteResponse)
def update_session_note(
    note_id: int, payload: SessionNoteUpdate, _: CurrentUser = clinical
) -> SessionNoteResponse:
    try:
        note = session_note_service.update(note_id, payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return SessionNoteResponse.model_validate(note)


@router.delete("/session-notes/{note_id}")
def delete_session_note(note_id: int, _: CurrentUser = clinical) -> dict:
    if not session_note_records.delete(note_id):
        raise not_found("Session note")
    return {"message": "Seans notu silindi"}
