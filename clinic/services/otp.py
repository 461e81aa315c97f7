import enum
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from clinic.config import settings
from clinic.services.accounts import (
    AccountConflictError,
    AccountDirectory,
    PATIENT_ROLE,
    PatientAccount,
    SqlAccountDirectory,
)
from clinic.services.challenges import ChallengeStore, SqlChallengeStore
from clinic.services.sms import (
    SmsNotConfigured,
    SmsSendError,
    build_otp_message,
    dispatch_sms,
)

LOGGER = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999

MSG_SENT = "Doğrulama kodu gönderildi"
MSG_SEND_FAILED = "Kod gönderilemedi"
MSG_NO_PATIENT = "Bu telefon numarasıyla kayıtlı hasta bulunamadı"
MSG_PATIENT_MISSING = "Hasta kaydı bulunamadı"
MSG_TOO_MANY = "Çok fazla hatalı deneme. Yeni kod isteyin"
MSG_EXPIRED = "Kod süresi dolmuş veya geçersiz. Yeni kod isteyin"
MSG_INVALID = "Geçersiz kod. {remaining} deneme hakkınız kaldı"
MSG_VERIFIED = "Doğrulama başarılı"
MSG_VERIFY_FAILED = "Doğrulama yapılamadı"


class OtpOutcome(str, enum.Enum):
    SENT = "sent"
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED_OR_INVALID = "expired_or_invalid"
    INVALID_CODE = "invalid_code"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    FAILED = "failed"


@dataclass(frozen=True)
class OtpResult:
    success: bool
    message: str
    outcome: OtpOutcome
    user_id: Optional[int] = None
    remaining_attempts: Optional[int] = None
    delivered: Optional[bool] = None


SmsSender = Callable[[str, str], None]
Clock = Callable[[], datetime]


def normalize_phone(phone: str) -> str:
    return re.sub(r"[\s-]+", "", phone)


def generate_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpManager:
    """Issues and verifies phone codes for patients and provisions their logins.

    Every public method reports through an ``OtpResult``; storage failures are
    logged and surfaced as ``OtpOutcome.FAILED`` rather than raised.
    """

    def __init__(
        self,
        challenges: ChallengeStore,
        accounts: AccountDirectory,
        sender: SmsSender = dispatch_sms,
        clock: Clock = _utcnow,
        ttl_seconds: int = settings.otp_ttl_seconds,
        max_attempts: int = settings.otp_max_attempts,
    ) -> None:
        self._challenges = challenges
        self._accounts = accounts
        self._sender = sender
        self._clock = clock
        self.ttl_seconds = ttl_seconds
        self.max_attempts = max_attempts

    def issue(self, phone: str) -> OtpResult:
        clean_phone = normalize_phone(phone)
        try:
            patient = self._accounts.patient_by_phone(clean_phone)
            if patient is None:
                return OtpResult(False, MSG_NO_PATIENT, OtpOutcome.NOT_FOUND)
            now = self._clock()
            code = generate_code()
            self._challenges.issue(
                clean_phone,
                code,
                created_at=now,
                expires_at=now + timedelta(seconds=self.ttl_seconds),
            )
        except SQLAlchemyError:
            LOGGER.exception("Failed to issue OTP for %s", clean_phone)
            return OtpResult(False, MSG_SEND_FAILED, OtpOutcome.FAILED)
        delivered = self._dispatch(clean_phone, code)
        return OtpResult(True, MSG_SENT, OtpOutcome.SENT, delivered=delivered)

    def verify(self, phone: str, code: str) -> OtpResult:
        clean_phone = normalize_phone(phone)
        clean_code = code.strip()
        try:
            return self._verify(clean_phone, clean_code)
        except (SQLAlchemyError, AccountConflictError):
            LOGGER.exception("Failed to verify OTP for %s", clean_phone)
            return OtpResult(False, MSG_VERIFY_FAILED, OtpOutcome.FAILED)

    def sweep(self) -> int:
        try:
            removed = self._challenges.delete_expired(self._clock())
        except Exception:
            LOGGER.exception("Failed to delete expired OTP codes")
            return 0
        if removed:
            LOGGER.info("Deleted %d expired OTP codes", removed)
        return removed

    def _verify(self, phone: str, code: str) -> OtpResult:
        latest = self._challenges.latest(phone)
        if latest is not None and latest.attempts >= self.max_attempts:
            self._challenges.mark_dead(latest.id)
            return OtpResult(False, MSG_TOO_MANY, OtpOutcome.TOO_MANY_ATTEMPTS)

        challenge = self._challenges.find_live(phone, self._clock())
        if challenge is None:
            return OtpResult(False, MSG_EXPIRED, OtpOutcome.EXPIRED_OR_INVALID)

        if not secrets.compare_digest(challenge.code, code):
            attempts = self._challenges.increment_attempts(challenge.id)
            remaining = self.max_attempts - attempts
            if remaining <= 0:
                self._challenges.mark_dead(challenge.id)
                return OtpResult(False, MSG_TOO_MANY, OtpOutcome.TOO_MANY_ATTEMPTS)
            return OtpResult(
                False,
                MSG_INVALID.format(remaining=remaining),
                OtpOutcome.INVALID_CODE,
                remaining_attempts=remaining,
            )

        if not self._challenges.consume(challenge.id):
            return OtpResult(False, MSG_EXPIRED, OtpOutcome.EXPIRED_OR_INVALID)

        patient = self._accounts.patient_by_phone(phone)
        if patient is None:
            return OtpResult(False, MSG_PATIENT_MISSING, OtpOutcome.NOT_FOUND)

        user_id = patient.user_id
        if user_id is None or self._accounts.user_by_id(user_id) is None:
            user_id = self._provision(patient)
        return OtpResult(True, MSG_VERIFIED, OtpOutcome.VERIFIED, user_id=user_id)

    def _provision(self, patient: PatientAccount) -> int:
        existing = self._accounts.user_by_username(patient.phone)
        if existing is not None and existing.role != PATIENT_ROLE:
            raise AccountConflictError(
                f"Username {patient.phone} belongs to a staff account"
            )
        if existing is not None:
            user = existing
        else:
            email = patient.email or f"{patient.phone}@patient.local"
            if self._accounts.user_by_email(email) is not None:
                email = f"{patient.phone}@patient.local"
            user = self._accounts.create_patient_user(
                username=patient.phone, email=email, phone=patient.phone
            )
            LOGGER.info("Created patient user %s for patient %s", user.id, patient.id)
        self._accounts.link_user(patient.id, user.id)
        return user.id

    def _dispatch(self, phone: str, code: str) -> bool:
        body = build_otp_message(code, self.ttl_seconds)
        try:
            self._sender(phone, body)
        except SmsNotConfigured:
            LOGGER.warning(
                "\n%s\nOTP KODU: %s\nTelefon: %s\nSMS Mesajı: %s\n%s",
                "=" * 50,
                code,
                phone,
                body,
                "=" * 50,
            )
            return False
        except (SmsSendError, SQLAlchemyError):
            LOGGER.error("SMS delivery failed for %s", phone, exc_info=True)
            LOGGER.warning("[FALLBACK] OTP: %s for %s", code, phone)
            return False
        return True


def get_otp_manager() -> OtpManager:
    return otp_manager


otp_manager = OtpManager(SqlChallengeStore(), SqlAccountDirectory())
