"""Storage backends for OTP challenges.

Both stores honour the same contract: one unverified challenge per phone after
``issue``, "latest" ordered by creation time with the highest id winning ties,
and attempt increments applied atomically.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from itertools import count
from threading import Lock
from typing import Optional, Protocol

from sqlalchemy import delete, select, update

from clinic.database import session_scope
from clinic.models.schema.otp import OtpChallengeEntry


@dataclass(frozen=True)
class Challenge:
    id: int
    phone: str
    code: str
    created_at: datetime
    expires_at: datetime
    attempts: int
    verified: bool


class ChallengeStore(Protocol):
    def issue(
        self, phone: str, code: str, created_at: datetime, expires_at: datetime
    ) -> Challenge: ...

    def latest(self, phone: str) -> Optional[Challenge]: ...

    def find_live(self, phone: str, now: datetime) -> Optional[Challenge]: ...

    def increment_attempts(self, challenge_id: int) -> int: ...

    def mark_dead(self, challenge_id: int) -> None: ...

    def consume(self, challenge_id: int) -> bool: ...

    def delete_expired(self, now: datetime) -> int: ...


def _to_challenge(entry: OtpChallengeEntry) -> Challenge:
    return Challenge(
        id=entry.id,
        phone=entry.phone,
        code=entry.code,
        created_at=entry.created_at,
        expires_at=entry.expires_at,
        attempts=entry.attempts,
        verified=bool(entry.verified),
    )


class SqlChallengeStore:
    def issue(
        self, phone: str, code: str, created_at: datetime, expires_at: datetime
    ) -> Challenge:
        with session_scope() as session:
            session.execute(
                update(OtpChallengeEntry)
                .where(
                    OtpChallengeEntry.phone == phone,
                    OtpChallengeEntry.verified.is_(False),
                )
                .values(verified=True)
            )
            entry = OtpChallengeEntry(
                phone=phone,
                code=code,
                created_at=created_at,
                expires_at=expires_at,
                attempts=0,
                verified=False,
            )
            session.add(entry)
            session.flush()
            return _to_challenge(entry)

    def latest(self, phone: str) -> Optional[Challenge]:
        with session_scope() as session:
            entry = session.execute(
                select(OtpChallengeEntry)
                .where(OtpChallengeEntry.phone == phone)
                .order_by(
                    OtpChallengeEntry.created_at.desc(), OtpChallengeEntry.id.desc()
                )
                .limit(1)
            ).scalar_one_or_none()
            return _to_challenge(entry) if entry is not None else None

    def find_live(self, phone: str, now: datetime) -> Optional[Challenge]:
        with session_scope() as session:
            entry = session.execute(
                select(OtpChallengeEntry)
                .where(
                    OtpChallengeEntry.phone == phone,
                    OtpChallengeEntry.verified.is_(False),
                    OtpChallengeEntry.expires_at > now,
                )
                .order_by(
                    OtpChallengeEntry.created_at.desc(), OtpChallengeEntry.id.desc()
                )
                .limit(1)
            ).scalar_one_or_none()
            return _to_challenge(entry) if entry is not None else None

    def increment_attempts(self, challenge_id: int) -> int:
        with session_scope() as session:
            session.execute(
                update(OtpChallengeEntry)
                .where(OtpChallengeEntry.id == challenge_id)
                .values(attempts=OtpChallengeEntry.attempts + 1)
            )
            return session.execute(
                select(OtpChallengeEntry.attempts).where(
                    OtpChallengeEntry.id == challenge_id
                )
            ).scalar_one()

    def mark_dead(self, challenge_id: int) -> None:
        with session_scope() as session:
            session.execute(
                update(OtpChallengeEntry)
                .where(OtpChallengeEntry.id == challenge_id)
                .values(verified=True)
            )

    def consume(self, challenge_id: int) -> bool:
        with session_scope() as session:
            result = session.execute(
                update(OtpChallengeEntry)
                .where(
                    OtpChallengeEntry.id == challenge_id,
                    OtpChallengeEntry.verified.is_(False),
                )
                .values(verified=True)
            )
            return result.rowcount == 1

    def delete_expired(self, now: datetime) -> int:
        with session_scope() as session:
            result = session.execute(
                delete(OtpChallengeEntry).where(OtpChallengeEntry.expires_at <= now)
            )
            return result.rowcount


class MemoryChallengeStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._ids = count(1)
        self._challenges: dict[int, Challenge] = {}

    def issue(
        self, phone: str, code: str, created_at: datetime, expires_at: datetime
    ) -> Challenge:
        with self._lock:
            for challenge in list(self._challenges.values()):
                if challenge.phone == phone and not challenge.verified:
                    self._challenges[challenge.id] = replace(challenge, verified=True)
            challenge = Challenge(
                id=next(self._ids),
                phone=phone,
                code=code,
                created_at=created_at,
                expires_at=expires_at,
                attempts=0,
                verified=False,
            )
            self._challenges[challenge.id] = challenge
            return challenge

    def latest(self, phone: str) -> Optional[Challenge]:
        with self._lock:
            return self._newest(c for c in self._challenges.values() if c.phone == phone)

    def find_live(self, phone: str, now: datetime) -> Optional[Challenge]:
        with self._lock:
            return self._newest(
                c
                for c in self._challenges.values()
                if c.phone == phone and not c.verified and c.expires_at > now
            )

    def increment_attempts(self, challenge_id: int) -> int:
        with self._lock:
            challenge = self._challenges[challenge_id]
            updated = replace(challenge, attempts=challenge.attempts + 1)
            self._challenges[challenge_id] = updated
            return updated.attempts

    def mark_dead(self, challenge_id: int) -> None:
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            if challenge is not None:
                self._challenges[challenge_id] = replace(challenge, verified=True)

    def consume(self, challenge_id: int) -> bool:
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            if challenge is None or challenge.verified:
                return False
            self._challenges[challenge_id] = replace(challenge, verified=True)
            return True

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [c.id for c in self._challenges.values() if c.expires_at <= now]
            for challenge_id in expired:
                del self._challenges[challenge_id]
            return len(expired)

    @staticmethod
    def _newest(challenges) -> Optional[Challenge]:
        return max(challenges, key=lambda c: (c.created_at, c.id), default=None)
