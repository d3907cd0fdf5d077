"""Email and SMS verification methods.

These methods generate the code themselves but delegate sending to the
application via IMfaDeliveryHook.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol

from ..config import OtpConfig
from ..domain import MethodChallenge, MethodType
from ..exceptions import InvalidCodeError, ResendTooSoonError, ValidationError
from .base import SecretBackedMethod

if TYPE_CHECKING:
    from ..domain import Account
    from ..ports import IMfaDeliveryHook

logger = logging.getLogger(__name__)


class IOtpRateLimitStore(Protocol):
    """Protocol for tracking when a code was last sent to an account."""

    async def record_send(self, identifier: str) -> None:
        """Record that a code was sent.

        Args:
            identifier: Account identifier.
        """
        ...

    async def seconds_since_last_send(self, identifier: str) -> float | None:
        """Get seconds elapsed since the last send.

        Args:
            identifier: Account identifier.

        Returns:
            Seconds since last send, or None if never sent.
        """
        ...


class InMemoryOtpRateLimitStore(IOtpRateLimitStore):
    """In-memory rate limit store for TESTING ONLY.

    ⚠️ WARNING: State lives in a local dictionary.
    It will NOT work in multi-worker environments.
    """

    def __init__(self) -> None:
        self._last_sent: dict[str, float] = {}

    async def record_send(self, identifier: str) -> None:
        self._last_sent[identifier] = time.time()

    async def seconds_since_last_send(self, identifier: str) -> float | None:
        last_sent = self._last_sent.get(identifier)
        if last_sent is None:
            return None
        return time.time() - last_sent

    def forget(self, identifier: str) -> None:
        self._last_sent.pop(identifier, None)


class OutOfBandMethod(SecretBackedMethod):
    """Base class for methods that deliver codes to the owner.

    Codes are time-based with a period of ``OtpConfig.ttl_seconds`` so a
    delivered code stays valid for roughly that long.
    """

    #: Form field holding the delivery target.
    target_field: str

    def __init__(
        self,
        *,
        delivery_hook: IMfaDeliveryHook,
        config: OtpConfig | None = None,
        rate_limit_store: IOtpRateLimitStore | None = None,
    ) -> None:
        """Initialize the method.

        Args:
            delivery_hook: Hook that sends the code.
            config: Code settings.
            rate_limit_store: Resend tracking (in-memory if not provided).
        """
        self.config = config or OtpConfig()
        super().__init__(
            digits=self.config.code_length,
            interval=self.config.ttl_seconds,
            valid_window=self.config.valid_window,
        )
        self.delivery_hook = delivery_hook
        self.rate_limit_store = rate_limit_store or InMemoryOtpRateLimitStore()

    def _target(self, account: Account) -> str | None:
        raise NotImplementedError

    async def _deliver(self, target: str, code: str) -> None:
        raise NotImplementedError

    def _require_target(self, account: Account) -> str:
        target = self._target(account)
        if not target:
            raise ValidationError.for_field(
                self.target_field,
                f"The {self.target_field} field is required for "
                f"{self.method_type.label.lower()} verification.",
            )
        return target

    async def _check_cooldown(self, account: Account) -> None:
        elapsed = await self.rate_limit_store.seconds_since_last_send(account.id)
        if elapsed is not None and elapsed < self.config.cooldown_seconds:
            raise ResendTooSoonError(int(self.config.cooldown_seconds - elapsed) or 1)

    async def enable(self, account: Account) -> MethodChallenge:
        """Create a secret and send its first code.

        Enabling again, even with another target, counts as a resend.

        Raises:
            ValidationError: If the account has no delivery target.
            ResendTooSoonError: If a code was sent within the cooldown period.
        """
        target = self._require_target(account)
        await self._check_cooldown(account)
        self._new_secret(account)
        await self._send(account, target)
        return MethodChallenge(
            method_type=self.method_type,
            visual=False,
            delivered_to=target,
        )

    async def resend(self, account: Account) -> MethodChallenge:
        """Send the current code again.

        Raises:
            ResendTooSoonError: If called within the cooldown period.
            InvalidCodeError: If nothing is pending for the account.
        """
        await self._check_cooldown(account)

        if not account.verification_secret:
            raise InvalidCodeError("No pending secret for this account")
        target = self._require_target(account)
        await self._send(account, target)
        return MethodChallenge(
            method_type=self.method_type,
            visual=False,
            delivered_to=target,
        )

    async def _send(self, account: Account, target: str) -> None:
        code = self.current_code(account)
        if code is None:
            return
        await self._deliver(target, code)
        await self.rate_limit_store.record_send(account.id)
        logger.info(
            "Sent %s verification code for account %s",
            self.method_type.value,
            account.id,
        )


class EmailMethod(OutOfBandMethod):
    """Verification through codes sent by email.

    Example:
        ```python
        class MyEmailHook(IMfaDeliveryHook):
            async def send_email_otp(self, email: str, code: str) -> None:
                await sendgrid.send(to=email, body=f"Your code is: {code}")

        method = EmailMethod(delivery_hook=MyEmailHook())
        challenge = await method.enable(account)
        ```
    """

    method_type = MethodType.EMAIL
    target_field = "email"

    def _target(self, account: Account) -> str | None:
        return account.email

    async def _deliver(self, target: str, code: str) -> None:
        await self.delivery_hook.send_email_otp(target, code)


class PhoneMethod(OutOfBandMethod):
    """Verification through codes sent by SMS."""

    method_type = MethodType.PHONE
    target_field = "phone"

    def _target(self, account: Account) -> str | None:
        return account.phone

    async def _deliver(self, target: str, code: str) -> None:
        await self.delivery_hook.send_sms_otp(target, code)


__all__: list[str] = [
    "IOtpRateLimitStore",
    "InMemoryOtpRateLimitStore",
    "OutOfBandMethod",
    "EmailMethod",
    "PhoneMethod",
]
