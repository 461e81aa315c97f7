from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from sqlalchemy import select

from clinic.config import settings
from clinic.database import session_scope
from clinic.models.schema.sms_setting import SmsSettingEntry

LOGGER = logging.getLogger(__name__)


class SmsSendError(RuntimeError):
    pass


class SmsNotConfigured(SmsSendError):
    pass


@dataclass(frozen=True)
class SmsConfig:
    account_sid: str
    auth_token: str
    from_number: str
    provider: str = "twilio"


def resolve_sms_config() -> Optional[SmsConfig]:
    """Active SMS settings row first, then the TWILIO_* environment."""
    with session_scope() as session:
        entry = session.execute(
            select(SmsSettingEntry)
            .where(SmsSettingEntry.is_active.is_(True))
            .order_by(SmsSettingEntry.updated_at.desc(), SmsSettingEntry.id.desc())
            .limit(1)
        ).scalar_one_or_none()
        if entry is not None:
            return SmsConfig(
                account_sid=entry.account_sid,
                auth_token=entry.auth_token,
                from_number=entry.phone_number,
                provider=entry.provider,
            )
    if (
        settings.twilio_account_sid
        and settings.twilio_auth_token
        and settings.twilio_phone_number
    ):
        return SmsConfig(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_phone_number,
        )
    return None


def dispatch_sms(to_phone: str, body: str) -> None:
    config = resolve_sms_config()
    if config is None:
        raise SmsNotConfigured("SMS provider is not configured")
    send_sms(to_phone, body, config)


def send_sms(to_phone: str, body: str, config: SmsConfig) -> None:
    if config.provider != "twilio":
        raise SmsNotConfigured(f"Unsupported SMS provider: {config.provider}")
    if not config.account_sid or not config.auth_token or not config.from_number:
        raise SmsNotConfigured("Twilio is not configured")

    to_number = normalize_e164(to_phone)
    from_number = normalize_e164(config.from_number)
    LOGGER.info("Sending SMS to=%s from=%s", to_number, from_number)
    endpoint = (
        "https://api.twilio.com/2010-04-01/Accounts/"
        f"{config.account_sid}/Messages.json"
    )
    payload = urlencode({"To": to_number, "From": from_number, "Body": body}).encode(
        "utf-8"
    )
    token = base64.b64encode(
        f"{config.account_sid}:{config.auth_token}".encode("utf-8")
    ).decode("ascii")
    request = Request(
        endpoint,
        data=payload,
        headers={
            "Authorization": f"Basic {token}",
            "Content-Type": "application/x-www-form-urlencoded",
        },
        method="POST",
    )
    try:
        with urlopen(request, timeout=10) as response:
            response.read()
    except HTTPError as exc:
        error_body = exc.read().decode("utf-8", errors="replace")
        LOGGER.error(
            "Twilio API error to=%s from=%s response=%s",
            to_number,
            from_number,
            error_body,
        )
        raise SmsSendError("Failed to send SMS") from exc
    except URLError as exc:
        raise SmsSendError("Failed to reach Twilio API") from exc


def normalize_e164(phone_number: str) -> str:
    raw = phone_number.strip()
    digits = re.sub(r"\D", "", raw)
    if not digits:
        raise SmsSendError("Phone number is missing")
    if not raw.startswith("+"):
        default_code = re.sub(r"\D", "", settings.default_country_code)
        # Local numbers carry a trunk "0" in front of the 10-digit subscriber number.
        if len(digits) == 11 and digits.startswith("0"):
            digits = digits[1:]
        if len(digits) == 10:
            if not default_code:
                raise SmsSendError("Default country code is not configured")
            digits = f"{default_code}{digits}"
    if len(digits) < 10 or len(digits) > 15:
        raise SmsSendError("Phone number must include a valid country code")
    return f"+{digits}"


def build_otp_message(code: str, ttl_seconds: int) -> str:
    minutes = max(1, ttl_seconds // 60)
    return (
        f"{settings.clinic_name} doğrulama kodunuz: {code}\n"
        f"Geçerlilik süresi: {minutes} dakika"
    )
