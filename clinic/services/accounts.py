from dataclasses import dataclass, replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import Optional, Protocol

from sqlalchemy import select, update

from clinic.database import session_scope
from clinic.models.schema.patient import PatientEntry
from clinic.models.schema.user import UserEntry

PATIENT_ROLE = "patient"


class AccountConflictError(ValueError):
    pass


@dataclass(frozen=True)
class PatientAccount:
    id: int
    phone: str
    email: Optional[str]
    user_id: Optional[int]
    is_verified: bool = False


@dataclass(frozen=True)
class UserAccount:
    id: int
    username: str
    email: str
    role: str
    phone: Optional[str] = None


class AccountDirectory(Protocol):
    def patient_by_phone(self, phone: str) -> Optional[PatientAccount]: ...

    def user_by_id(self, user_id: int) -> Optional[UserAccount]: ...

    def user_by_email(self, email: str) -> Optional[UserAccount]: ...

    def user_by_username(self, username: str) -> Optional[UserAccount]: ...

    def create_patient_user(
        self, username: str, email: str, phone: str
    ) -> UserAccount: ...

    def link_user(self, patient_id: int, user_id: int) -> None: ...


def _to_user(entry: UserEntry) -> UserAccount:
    return UserAccount(
        id=entry.id,
        username=entry.username,
        email=entry.email,
        role=entry.role,
        phone=entry.phone,
    )


class SqlAccountDirectory:
    def patient_by_phone(self, phone: str) -> Optional[PatientAccount]:
        with session_scope() as session:
            entry = session.execute(
                select(PatientEntry).where(PatientEntry.phone == phone).limit(1)
            ).scalar_one_or_none()
            if entry is None:
                return None
            return PatientAccount(
                id=entry.id,
                phone=entry.phone,
                email=entry.email,
                user_id=entry.user_id,
                is_verified=bool(entry.is_verified),
            )

    def user_by_id(self, user_id: int) -> Optional[UserAccount]:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            return _to_user(entry) if entry is not None else None

    def user_by_email(self, email: str) -> Optional[UserAccount]:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.email == email.strip().lower())
            ).scalar_one_or_none()
            return _to_user(entry) if entry is not None else None

    def user_by_username(self, username: str) -> Optional[UserAccount]:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.username == username)
            ).scalar_one_or_none()
            return _to_user(entry) if entry is not None else None

    def create_patient_user(self, username: str, email: str, phone: str) -> UserAccount:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            entry = UserEntry(
                username=username,
                email=email.strip().lower(),
                password_hash=None,
                phone=phone,
                role=PATIENT_ROLE,
                is_verified=True,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            return _to_user(entry)

    def link_user(self, patient_id: int, user_id: int) -> None:
        with session_scope() as session:
            session.execute(
                update(PatientEntry)
                .where(PatientEntry.id == patient_id)
                .values(
                    user_id=user_id,
                    is_verified=True,
                    updated_at=datetime.now(timezone.utc),
                )
            )


class MemoryAccountDirectory:
    """Dictionary-backed directory used where no database is wanted."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._patient_ids = count(1)
        self._user_ids = count(1)
        self.patients: dict[int, PatientAccount] = {}
        self.users: dict[int, UserAccount] = {}

    def add_patient(self, phone: str, email: Optional[str] = None) -> PatientAccount:
        with self._lock:
            patient = PatientAccount(
                id=next(self._patient_ids), phone=phone, email=email, user_id=None
            )
            self.patients[patient.id] = patient
            return patient

    def patient_by_phone(self, phone: str) -> Optional[PatientAccount]:
        with self._lock:
            return next(
                (p for p in self.patients.values() if p.phone == phone), None
            )

    def user_by_id(self, user_id: int) -> Optional[UserAccount]:
        with self._lock:
            return self.users.get(user_id)

    def user_by_email(self, email: str) -> Optional[UserAccount]:
        key = email.strip().lower()
        with self._lock:
            return next((u for u in self.users.values() if u.email == key), None)

    def user_by_username(self, username: str) -> Optional[UserAccount]:
        with self._lock:
            return next(
                (u for u in self.users.values() if u.username == username), None
            )

    def create_patient_user(self, username: str, email: str, phone: str) -> UserAccount:
        with self._lock:
            key = email.strip().lower()
            if any(u.username == username or u.email == key for u in self.users.values()):
                raise AccountConflictError("User already exists")
            user = UserAccount(
                id=next(self._user_ids),
                username=username,
                email=key,
                role=PATIENT_ROLE,
                phone=phone,
            )
            self.users[user.id] = user
            return user

    def link_user(self, patient_id: int, user_id: int) -> None:
        with self._lock:
            patient = self.patients[patient_id]
            self.patients[patient_id] = replace(
                patient, user_id=user_id, is_verified=True
            )
