from datetime import datetime, timezone

from sqlalchemy import select, update

from clinic.database import session_scope
from clinic.models.schema.sms_setting import SmsSettingEntry
from clinic.schemas.sms import SmsSettingCreate, SmsSettingUpdate
from clinic.services.records import RecordNotFoundError


class SmsSettingsStore:
    """Provider credentials; at most one row is active at a time."""

    def list_settings(self) -> list[SmsSettingEntry]:
        with session_scope() as session:
            return list(
                session.execute(
                    select(SmsSettingEntry).order_by(SmsSettingEntry.id)
                ).scalars().all()
            )

    def create(self, payload: SmsSettingCreate) -> SmsSettingEntry:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            if payload.is_active:
                self._deactivate_all(session)
            entry = SmsSettingEntry(
                **payload.model_dump(), created_at=now, updated_at=now
            )
            session.add(entry)
            session.flush()
            return entry

    def update(self, setting_id: int, payload: SmsSettingUpdate) -> SmsSettingEntry:
        values = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        with session_scope() as session:
            entry = session.get(SmsSettingEntry, setting_id)
            if entry is None:
                raise RecordNotFoundError("SMS setting not found")
            if values.get("is_active"):
                self._deactivate_all(session, exclude_id=setting_id)
            for field, value in values.items():
                setattr(entry, field, value)
            entry.updated_at = datetime.now(timezone.utc)
            session.flush()
            return entry

    def delete(self, setting_id: int) -> None:
        with session_scope() as session:
            entry = session.get(SmsSettingEntry, setting_id)
            if entry is None:
                raise RecordNotFoundError("SMS setting not found")
            session.delete(entry)

    def _deactivate_all(self, session, exclude_id: int | None = None) -> None:
        stmt = update(SmsSettingEntry).where(SmsSettingEntry.is_active.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(SmsSettingEntry.id != exclude_id)
        session.execute(stmt.values(is_active=False))


sms_settings_store = SmsSettingsStore()
