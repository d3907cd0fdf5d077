"""Tests for the verification method backends."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pyotp
import pytest

from cqrs_ddd_twofactor import (
    Account,
    AuthenticatorMethod,
    EmailMethod,
    InvalidCodeError,
    IVerificationMethod,
    MethodType,
    OtpConfig,
    PhoneMethod,
    ResendTooSoonError,
    TotpConfig,
    ValidationError,
)
from cqrs_ddd_twofactor.methods.otp import InMemoryOtpRateLimitStore


@pytest.fixture
def fresh_account() -> Account:
    return Account(id="acc-1", email="user@example.com", phone="+15551234567")


class TestAuthenticatorMethod:
    def test_implements_port(self) -> None:
        assert isinstance(AuthenticatorMethod(), IVerificationMethod)

    @pytest.mark.asyncio
    async def test_enable_returns_visual_challenge(self, fresh_account) -> None:
        method = AuthenticatorMethod(TotpConfig(issuer="Acme"))

        challenge = await method.enable(fresh_account)

        assert challenge.method_type is MethodType.AUTHENTICATOR
        assert challenge.visual is True
        assert challenge.delivered_to is None
        parsed = urlparse(challenge.provisioning_uri)
        assert parsed.scheme == "otpauth"
        assert parse_qs(parsed.query)["issuer"] == ["Acme"]
        assert parse_qs(parsed.query)["secret"] == [fresh_account.verification_secret]

    @pytest.mark.asyncio
    async def test_manual_key_groups_secret(self, fresh_account) -> None:
        challenge = await AuthenticatorMethod().enable(fresh_account)

        assert challenge.manual_key.replace(" ", "") == fresh_account.verification_secret
        assert all(len(block) <= 4 for block in challenge.manual_key.split(" "))

    @pytest.mark.asyncio
    async def test_enable_rotates_secret(self, fresh_account) -> None:
        method = AuthenticatorMethod()

        await method.enable(fresh_account)
        first = fresh_account.verification_secret
        await method.enable(fresh_account)

        assert fresh_account.verification_secret != first

    @pytest.mark.asyncio
    async def test_confirm_accepts_current_code(self, fresh_account) -> None:
        method = AuthenticatorMethod()
        await method.enable(fresh_account)

        await method.confirm(
            fresh_account, pyotp.TOTP(fresh_account.verification_secret).now()
        )

    @pytest.mark.asyncio
    async def test_confirm_tolerates_spaces(self, fresh_account) -> None:
        method = AuthenticatorMethod()
        await method.enable(fresh_account)
        code = pyotp.TOTP(fresh_account.verification_secret).now()

        await method.confirm(fresh_account, f"{code[:3]} {code[3:]}")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["12345", "1234567", "12a456", ""])
    async def test_confirm_rejects_malformed(self, fresh_account, code) -> None:
        method = AuthenticatorMethod()
        await method.enable(fresh_account)

        with pytest.raises(InvalidCodeError, match="6 digits"):
            await method.confirm(fresh_account, code)

    @pytest.mark.asyncio
    async def test_confirm_without_secret(self, fresh_account) -> None:
        with pytest.raises(InvalidCodeError, match="No pending secret"):
            await AuthenticatorMethod().confirm(fresh_account, "123456")

    @pytest.mark.asyncio
    async def test_confirm_rejects_code_for_other_secret(self, fresh_account) -> None:
        method = AuthenticatorMethod()
        await method.enable(fresh_account)
        other = pyotp.TOTP(pyotp.random_base32())
        code = other.now()
        if pyotp.TOTP(fresh_account.verification_secret).verify(code, valid_window=1):
            pytest.skip("random secrets collided on the current code")

        with pytest.raises(InvalidCodeError, match="Invalid or expired"):
            await method.confirm(fresh_account, code)

    @pytest.mark.asyncio
    async def test_disable_clears_secret(self, fresh_account) -> None:
        method = AuthenticatorMethod()
        await method.enable(fresh_account)

        await method.disable(fresh_account)

        assert fresh_account.verification_secret is None
        assert method.current_code(fresh_account) is None


class TestEmailMethod:
    def test_implements_port(self, delivery_hook) -> None:
        assert isinstance(EmailMethod(delivery_hook=delivery_hook), IVerificationMethod)

    @pytest.mark.asyncio
    async def test_enable_sends_code(self, fresh_account, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)

        challenge = await method.enable(fresh_account)

        assert challenge.visual is False
        assert challenge.provisioning_uri is None
        assert challenge.delivered_to == "user@example.com"
        assert len(delivery_hook.emails_sent) == 1
        email, code = delivery_hook.emails_sent[0]
        assert email == "user@example.com"
        assert len(code) == 6
        assert code == method.current_code(fresh_account)

    @pytest.mark.asyncio
    async def test_delivered_code_confirms(self, fresh_account, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)
        await method.enable(fresh_account)

        await method.confirm(fresh_account, delivery_hook.last_code)

    @pytest.mark.asyncio
    async def test_code_length_follows_config(self, fresh_account, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook, config=OtpConfig(code_length=8))

        await method.enable(fresh_account)

        assert len(delivery_hook.last_code) == 8

    @pytest.mark.asyncio
    async def test_missing_email_raises(self, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)
        account = Account(id="acc-2")

        with pytest.raises(ValidationError) as exc_info:
            await method.enable(account)

        assert exc_info.value.field == "email"
        assert account.verification_secret is None
        assert delivery_hook.emails_sent == []

    @pytest.mark.asyncio
    async def test_resend_respects_cooldown(self, fresh_account, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)
        await method.enable(fresh_account)

        with pytest.raises(ResendTooSoonError) as exc_info:
            await method.resend(fresh_account)

        assert 0 < exc_info.value.retry_after <= 60
        assert len(delivery_hook.emails_sent) == 1

    @pytest.mark.asyncio
    async def test_resend_after_cooldown(self, fresh_account, delivery_hook) -> None:
        store = InMemoryOtpRateLimitStore()
        method = EmailMethod(delivery_hook=delivery_hook, rate_limit_store=store)
        await method.enable(fresh_account)
        store.forget(fresh_account.id)

        challenge = await method.resend(fresh_account)

        assert challenge.delivered_to == "user@example.com"
        assert len(delivery_hook.emails_sent) == 2

    @pytest.mark.asyncio
    async def test_enable_again_respects_cooldown(
        self, fresh_account, delivery_hook
    ) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)
        await method.enable(fresh_account)
        secret = fresh_account.verification_secret
        fresh_account.email = "someone-else@example.com"

        with pytest.raises(ResendTooSoonError):
            await method.enable(fresh_account)

        assert fresh_account.verification_secret == secret
        assert delivery_hook.emails_sent == [
            ("user@example.com", delivery_hook.emails_sent[0][1])
        ]

    @pytest.mark.asyncio
    async def test_enable_after_cooldown(self, fresh_account, delivery_hook) -> None:
        store = InMemoryOtpRateLimitStore()
        method = EmailMethod(delivery_hook=delivery_hook, rate_limit_store=store)
        await method.enable(fresh_account)
        store.forget(fresh_account.id)

        await method.enable(fresh_account)

        assert len(delivery_hook.emails_sent) == 2

    @pytest.mark.asyncio
    async def test_resend_without_pending_secret(self, fresh_account, delivery_hook) -> None:
        method = EmailMethod(delivery_hook=delivery_hook)

        with pytest.raises(InvalidCodeError):
            await method.resend(fresh_account)


class TestPhoneMethod:
    @pytest.mark.asyncio
    async def test_enable_sends_sms(self, fresh_account, delivery_hook) -> None:
        method = PhoneMethod(delivery_hook=delivery_hook)

        challenge = await method.enable(fresh_account)

        assert challenge.method_type is MethodType.PHONE
        assert challenge.delivered_to == "+15551234567"
        assert delivery_hook.sms_sent[0][0] == "+15551234567"
        assert delivery_hook.emails_sent == []

    @pytest.mark.asyncio
    async def test_missing_phone_raises(self, delivery_hook) -> None:
        method = PhoneMethod(delivery_hook=delivery_hook)

        with pytest.raises(ValidationError, match="phone"):
            await method.enable(Account(id="acc-3", email="x@example.com"))

    @pytest.mark.asyncio
    async def test_disable_clears_secret(self, fresh_account, delivery_hook) -> None:
        method = PhoneMethod(delivery_hook=delivery_hook)
        await method.enable(fresh_account)

        await method.disable(fresh_account)

        assert fresh_account.verification_secret is None
