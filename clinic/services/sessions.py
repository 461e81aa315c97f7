from datetime import datetime, timedelta, timezone
import secrets
from typing import Optional

from sqlalchemy import delete, select, update

from clinic.config import settings
from clinic.database import session_scope
from clinic.models.schema.session import SessionEntry


class SessionStore:
    """Server-side login sessions; a JWT is only honoured while its session is open."""

    def open(self, user_id: int) -> str:
        now = datetime.now(timezone.utc)
        session_id = secrets.token_urlsafe(32)
        with session_scope() as session:
            self._purge_expired(session, now)
            session.add(
                SessionEntry(
                    token=session_id,
                    user_id=user_id,
                    created_at=now,
                    expires_at=now + timedelta(days=settings.refresh_token_expire_days),
                )
            )
        return session_id

    def resolve(self, session_id: str) -> Optional[int]:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            return session.execute(
                select(SessionEntry.user_id).where(
                    SessionEntry.token == session_id,
                    SessionEntry.revoked_at.is_(None),
                    SessionEntry.expires_at > now,
                )
            ).scalar_one_or_none()

    def close(self, session_id: str) -> bool:
        return self._revoke(SessionEntry.token == session_id) > 0

    def close_all(self, user_id: int) -> int:
        return self._revoke(SessionEntry.user_id == user_id)

    def _revoke(self, condition) -> int:
        with session_scope() as session:
            result = session.execute(
                update(SessionEntry)
                .where(condition, SessionEntry.revoked_at.is_(None))
                .values(revoked_at=datetime.now(timezone.utc))
            )
            return result.rowcount

    @staticmethod
    def _purge_expired(session, now: datetime) -> None:
        session.execute(delete(SessionEntry).where(SessionEntry.expires_at <= now))


session_store = SessionStore()
