from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import ADMIN_ONLY, require_roles
from clinic.routers.errors import http_error
from clinic.schemas.reports import DashboardStats
from clinic.schemas.sms import SmsSettingCreate, SmsSettingResponse, SmsSettingUpdate
from clinic.services.records import RecordNotFoundError
from clinic.services.reports import dashboard_stats
from clinic.services.sms_settings import sms_settings_store

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)


@router.get("/sms-settings", response_model=list[SmsSettingResponse])
def list_sms_settings() -> list[SmsSettingResponse]:
    return [
        SmsSettingResponse.model_validate(entry)
        for entry in sms_settings_store.list_settings()
    ]


@router.post(
    "/sms-settings",
    response_model=SmsSettingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_sms_setting(payload: SmsSettingCreate) -> SmsSettingResponse:
    return SmsSettingResponse.model_validate(sms_settings_store.create(payload))


@router.patch("/sms-settings/{setting_id}", response_model=SmsSettingResponse)
def update_sms_setting(
    setting_id: int, payload: SmsSettingUpdate
) -> SmsSettingResponse:
    try:
        entry = sms_settings_store.update(setting_id, payload)
    except RecordNotFoundError as exc:
        raise http_error(exc) from exc
    return SmsSettingResponse.model_validate(entry)


@router.delete("/sms-settings/{setting_id}")
def delete_sms_setting(setting_id: int) -> dict:
    try:
        sms_settings_store.delete(setting_id)
    except RecordNotFoundError as exc:
        raise http_error(exc) from exc
    return {"message": "SMS ayarı silindi"}


@router.get("/stats", response_model=DashboardStats)
def stats() -> DashboardStats:
    return dashboard_stats()
