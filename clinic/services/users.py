from datetime import datetime, timezone
import logging

from sqlalchemy import func, or_, select, update
from werkzeug.security import check_password_hash, generate_password_hash

from clinic.config import settings
from clinic.database import session_scope
from clinic.models.schema.patient import PatientEntry
from clinic.models.schema.user import UserEntry
from clinic.schemas.users import Role, UserCreate, UserUpdate

LOGGER = logging.getLogger(__name__)


class UserNotFoundError(ValueError):
    pass


class UserConflictError(ValueError):
    pass


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str | None, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


class UserStore:
    def has_users(self) -> bool:
        with session_scope() as session:
            return session.execute(select(func.count(UserEntry.id))).scalar_one() > 0

    def create_user(self, payload: UserCreate) -> UserEntry:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            self._check_unique(session, payload.username, payload.email)
            entry = UserEntry(
                username=payload.username,
                email=payload.email,
                password_hash=hash_password(payload.password),
                phone=payload.phone,
                role=payload.role.value,
                is_verified=True,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            return entry

    def update_user(self, user_id: int, payload: UserUpdate) -> UserEntry:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                raise UserNotFoundError("User not found")
            if payload.email and payload.email != entry.email:
                self._check_unique(session, None, payload.email, exclude_id=user_id)
                entry.email = payload.email
            if payload.password:
                entry.password_hash = hash_password(payload.password)
            if payload.role is not None:
                if entry.role == Role.PATIENT.value:
                    raise UserConflictError("Patient accounts cannot change role")
                entry.role = payload.role.value
            if payload.phone is not None:
                entry.phone = payload.phone or None
            entry.updated_at = datetime.now(timezone.utc)
            session.flush()
            return entry

    def delete_user(self, user_id: int) -> None:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                raise UserNotFoundError("User not found")
            # Patients never point at a deleted user.
            session.execute(
                update(PatientEntry)
                .where(PatientEntry.user_id == user_id)
                .values(user_id=None)
            )
            session.execute(
                update(PatientEntry)
                .where(PatientEntry.registered_by == user_id)
                .values(registered_by=None)
            )
            session.delete(entry)

    def list_users(self, role: Role | None = None) -> list[UserEntry]:
        stmt = select(UserEntry).order_by(UserEntry.id)
        if role is not None:
            stmt = stmt.where(UserEntry.role == role.value)
        with session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_user(self, user_id: int) -> UserEntry | None:
        with session_scope() as session:
            return session.get(UserEntry, user_id)

    def authenticate(self, username: str, password: str) -> UserEntry | None:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.username == username.strip())
            ).scalar_one_or_none()
        if entry is None or entry.role == Role.PATIENT.value:
            return None
        if not verify_password(entry.password_hash, password):
            return None
        return entry

    def ensure_seed_admin(self) -> None:
        username = settings.seed_admin_username
        if not username or not settings.seed_admin_password:
            return
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            existing = session.execute(
                select(UserEntry).where(UserEntry.username == username)
            ).scalar_one_or_none()
            if existing is not None:
                return
            session.add(
                UserEntry(
                    username=username,
                    email=settings.seed_admin_email or f"{username}@clinic.local",
                    password_hash=hash_password(settings.seed_admin_password),
                    role=Role.ADMIN.value,
                    is_verified=True,
                    created_at=now,
                    updated_at=now,
                )
            )
        LOGGER.info("Seeded admin user %s", username)

    def _check_unique(self, session, username, email, exclude_id=None) -> None:
        conditions = []
        if username:
            conditions.append(UserEntry.username == username)
        if email:
            conditions.append(UserEntry.email == email)
        if not conditions:
            return
        stmt = select(UserEntry).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(UserEntry.id != exclude_id)
        existing = session.execute(stmt.limit(1)).scalar_one_or_none()
        if existing is None:
            return
        if username and existing.username == username:
            raise UserConflictError("Bu kullanıcı adı zaten kullanılıyor")
        raise UserConflictError("Bu email adresi zaten kullanılıyor")


user_store = UserStore()
