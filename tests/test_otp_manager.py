from datetime import datetime, timedelta, timezone

import pytest

from clinic.services.accounts import PATIENT_ROLE, MemoryAccountDirectory, UserAccount
from clinic.services.challenges import MemoryChallengeStore
from clinic.services.otp import (
    CODE_MAX,
    CODE_MIN,
    OtpManager,
    OtpOutcome,
    generate_code,
    normalize_phone,
)
from clinic.services.sms import SmsNotConfigured, SmsSendError

PHONE = "05326127244"


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class Outbox:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def __call__(self, phone, body):
        if self.error is not None:
            raise self.error
        self.sent.append((phone, body))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def accounts():
    directory = MemoryAccountDirectory()
    directory.add_patient(PHONE, email="hasta@example.com")
    return directory


@pytest.fixture
def challenges():
    return MemoryChallengeStore()


@pytest.fixture
def manager(challenges, accounts, outbox, clock):
    return OtpManager(challenges, accounts, sender=outbox, clock=clock)


def sent_code(outbox):
    _, body = outbox.sent[-1]
    return body.split(": ", 1)[1].split("\n", 1)[0]


def wrong(code):
    return "100000" if code != "100000" else "100001"


def test_generated_codes_are_six_digits_in_range():
    for _ in range(500):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit() and code.isascii()
        assert CODE_MIN <= int(code) <= CODE_MAX


def test_normalize_phone_strips_spaces_and_dashes():
    assert normalize_phone(" 0532 612-72 44 ") == PHONE


def test_issue_unknown_phone_is_not_found(manager, outbox):
    result = manager.issue("05550000000")

    assert result.success is False
    assert result.outcome is OtpOutcome.NOT_FOUND
    assert outbox.sent == []


def test_issue_sends_code_without_returning_it(manager, outbox):
    result = manager.issue("0532 612 72 44")

    assert result.success is True
    assert result.outcome is OtpOutcome.SENT
    assert result.delivered is True
    phone, body = outbox.sent[0]
    assert phone == PHONE
    code = sent_code(outbox)
    assert code not in result.message
    assert "5 dakika" in body


def test_verify_succeeds_exactly_once(manager, outbox):
    manager.issue(PHONE)
    code = sent_code(outbox)

    first = manager.verify(PHONE, code)
    second = manager.verify(PHONE, code)

    assert first.success is True
    assert first.outcome is OtpOutcome.VERIFIED
    assert first.user_id is not None
    assert second.success is False
    assert second.outcome is OtpOutcome.EXPIRED_OR_INVALID


def test_new_challenge_invalidates_previous(manager, outbox):
    manager.issue(PHONE)
    first_code = sent_code(outbox)
    manager.issue(PHONE)
    second_code = sent_code(outbox)

    if first_code != second_code:
        assert manager.verify(PHONE, first_code).outcome is OtpOutcome.INVALID_CODE
    assert manager.verify(PHONE, second_code).outcome is OtpOutcome.VERIFIED


def test_only_one_live_challenge_per_phone(manager, challenges, clock):
    manager.issue(PHONE)
    manager.issue(PHONE)
    manager.issue(PHONE)

    live = [
        c
        for c in challenges._challenges.values()
        if not c.verified and c.expires_at > clock.now
    ]
    assert len(live) == 1


def test_three_wrong_codes_lock_the_challenge(manager, outbox):
    manager.issue(PHONE)
    code = sent_code(outbox)
    bad = wrong(code)

    first = manager.verify(PHONE, bad)
    second = manager.verify(PHONE, bad)
    third = manager.verify(PHONE, bad)
    after = manager.verify(PHONE, code)

    assert first.outcome is OtpOutcome.INVALID_CODE
    assert first.remaining_attempts == 2
    assert "2 deneme hakkınız kaldı" in first.message
    assert second.outcome is OtpOutcome.INVALID_CODE
    assert second.remaining_attempts == 1
    assert "1 deneme hakkınız kaldı" in second.message
    assert third.outcome is OtpOutcome.TOO_MANY_ATTEMPTS
    assert after.outcome is OtpOutcome.TOO_MANY_ATTEMPTS
    assert after.success is False


def test_expired_challenge_rejects_correct_code(manager, outbox, clock):
    manager.issue(PHONE)
    code = sent_code(outbox)
    clock.advance(seconds=301)

    result = manager.verify(PHONE, code)

    assert result.outcome is OtpOutcome.EXPIRED_OR_INVALID


def test_code_is_valid_until_expiry(manager, outbox, clock):
    manager.issue(PHONE)
    code = sent_code(outbox)
    clock.advance(seconds=299)

    assert manager.verify(PHONE, code).outcome is OtpOutcome.VERIFIED


def test_verify_without_any_challenge(manager):
    result = manager.verify(PHONE, "123456")

    assert result.outcome is OtpOutcome.EXPIRED_OR_INVALID


def test_first_verification_provisions_one_patient_user(manager, accounts, outbox):
    manager.issue(PHONE)
    first = manager.verify(PHONE, sent_code(outbox))
    manager.issue(PHONE)
    second = manager.verify(PHONE, sent_code(outbox))

    assert first.user_id == second.user_id
    assert len(accounts.users) == 1
    user = accounts.users[first.user_id]
    assert user.role == PATIENT_ROLE
    assert user.username == PHONE
    assert user.email == "hasta@example.com"
    patient = accounts.patient_by_phone(PHONE)
    assert patient.user_id == first.user_id
    assert patient.is_verified is True


def test_dangling_user_link_is_provisioned_again(manager, accounts, outbox):
    manager.issue(PHONE)
    first = manager.verify(PHONE, sent_code(outbox))
    del accounts.users[first.user_id]

    manager.issue(PHONE)
    second = manager.verify(PHONE, sent_code(outbox))

    assert second.outcome is OtpOutcome.VERIFIED
    assert second.user_id != first.user_id
    assert second.user_id in accounts.users
    assert accounts.patient_by_phone(PHONE).user_id == second.user_id


def test_provisioning_uses_synthetic_email_when_missing(challenges, outbox, clock):
    accounts = MemoryAccountDirectory()
    accounts.add_patient("05551112233")
    manager = OtpManager(challenges, accounts, sender=outbox, clock=clock)

    manager.issue("05551112233")
    result = manager.verify("05551112233", sent_code(outbox))

    assert accounts.users[result.user_id].email == "05551112233@patient.local"


def test_provisioning_reuses_existing_patient_username(manager, accounts, outbox):
    existing = accounts.create_patient_user(
        username=PHONE, email="eski@example.com", phone=PHONE
    )

    manager.issue(PHONE)
    result = manager.verify(PHONE, sent_code(outbox))

    assert result.user_id == existing.id
    assert len(accounts.users) == 1


def test_staff_username_clash_fails(manager, accounts, outbox):
    accounts.users[99] = UserAccount(
        id=99, username=PHONE, email="staff@example.com", role="admin"
    )

    manager.issue(PHONE)
    result = manager.verify(PHONE, sent_code(outbox))

    assert result.success is False
    assert result.outcome is OtpOutcome.FAILED


def test_unconfigured_provider_still_succeeds(challenges, accounts, clock, caplog):
    manager = OtpManager(
        challenges,
        accounts,
        sender=Outbox(error=SmsNotConfigured("missing")),
        clock=clock,
    )

    with caplog.at_level("WARNING"):
        result = manager.issue(PHONE)

    assert result.success is True
    assert result.delivered is False
    assert "OTP KODU" in caplog.text


def test_delivery_failure_falls_back_to_log(challenges, accounts, clock, caplog):
    manager = OtpManager(
        challenges,
        accounts,
        sender=Outbox(error=SmsSendError("boom")),
        clock=clock,
    )

    with caplog.at_level("WARNING"):
        result = manager.issue(PHONE)

    assert result.success is True
    assert result.outcome is OtpOutcome.SENT
    assert result.delivered is False
    assert "[FALLBACK]" in caplog.text


def test_same_timestamp_latest_is_highest_id(challenges, clock):
    expires = clock.now + timedelta(minutes=5)
    first = challenges.issue(PHONE, "111111", clock.now, expires)
    second = challenges.issue(PHONE, "222222", clock.now, expires)

    assert first.id < second.id
    assert challenges.latest(PHONE).id == second.id
    assert challenges.find_live(PHONE, clock.now).code == "222222"


def test_sweep_removes_only_expired(manager, challenges, clock):
    manager.issue(PHONE)
    clock.advance(minutes=10)
    manager.issue(PHONE)

    removed = manager.sweep()

    assert removed == 1
    assert len(challenges._challenges) == 1


def test_sweep_swallows_store_errors(accounts, clock):
    class BrokenStore(MemoryChallengeStore):
        def delete_expired(self, now):
            raise RuntimeError("database is gone")

    manager = OtpManager(BrokenStore(), accounts, clock=clock)

    assert manager.sweep() == 0
