import pytest

from clinic.schemas.sms import SmsSettingCreate
from clinic.services import sms
from clinic.services.sms import (
    SmsConfig,
    SmsNotConfigured,
    SmsSendError,
    build_otp_message,
    normalize_e164,
    resolve_sms_config,
)
from clinic.services.sms_settings import sms_settings_store


def test_normalize_local_turkish_number():
    assert normalize_e164("05326127244") == "+905326127244"
    assert normalize_e164("5326127244") == "+905326127244"


def test_normalize_keeps_international_number():
    assert normalize_e164("+1 (555) 000-1111") == "+15550001111"


def test_normalize_rejects_garbage():
    with pytest.raises(SmsSendError):
        normalize_e164("abc")
    with pytest.raises(SmsSendError):
        normalize_e164("12345")


def test_otp_message_mentions_code_and_minutes():
    message = build_otp_message("482913", 300)

    assert "482913" in message
    assert "5 dakika" in message


def test_unsupported_provider_is_not_configured():
    config = SmsConfig(account_sid="x", auth_token="y", from_number="+1555", provider="other")

    with pytest.raises(SmsNotConfigured):
        sms.send_sms("05326127244", "body", config)


def test_resolve_prefers_active_setting():
    assert resolve_sms_config() is None

    sms_settings_store.create(
        SmsSettingCreate(
            account_sid="AC999",
            auth_token="token",
            phone_number="+15550009999",
        )
    )

    config = resolve_sms_config()
    assert config.account_sid == "AC999"
    assert config.from_number == "+15550009999"


def test_dispatch_without_provider_raises():
    with pytest.raises(SmsNotConfigured):
        sms.dispatch_sms("05326127244", "body")


def test_send_sms_posts_to_twilio(monkeypatch):
    captured = {}

    class FakeResponse:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def read(self):
            return b"{}"

    def fake_urlopen(request, timeout):
        captured["url"] = request.full_url
        captured["data"] = request.data.decode("utf-8")
        captured["auth"] = request.get_header("Authorization")
        return FakeResponse()

    monkeypatch.setattr(sms, "urlopen", fake_urlopen)

    sms.send_sms(
        "05326127244",
        "Kodunuz",
        SmsConfig(account_sid="AC1", auth_token="secret", from_number="+15550001111"),
    )

    assert captured["url"].endswith("/Accounts/AC1/Messages.json")
    assert "To=%2B905326127244" in captured["data"]
    assert captured["auth"].startswith("Basic ")
