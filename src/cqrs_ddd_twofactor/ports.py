"""Ports (protocols) for two-factor enrollment.

The enrollment controller talks to storage, re-authentication, delivery,
notification and audit only through these interfaces. Applications provide
the implementations; in-memory versions live in ``memory``,
``notifications`` and ``audit``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .audit.events import TwoFactorAuditEvent
    from .domain import Account, MethodChallenge, MethodType
    from .notifications import Notification


@runtime_checkable
class IAccountRepository(Protocol):
    """Protocol for account storage.

    The account record is the serialization point: every controller
    operation does one ``get`` followed by at most one ``save``.
    """

    async def get(self, account_id: str) -> Account | None:
        """Load an account.

        Args:
            account_id: Account identifier.

        Returns:
            The account or None if it does not exist.
        """
        ...

    async def save(self, account: Account) -> None:
        """Persist every field of an account.

        Args:
            account: Account to store.
        """
        ...


@runtime_checkable
class IPasswordConfirmer(Protocol):
    """Protocol for re-authenticating the account owner."""

    async def confirm(self, account: Account, password: str) -> bool:
        """Check the submitted password.

        Args:
            account: Account being modified.
            password: Password the owner just typed.

        Returns:
            True if the password is the account's current password.
        """
        ...


@runtime_checkable
class INotificationSink(Protocol):
    """Protocol for fire-and-forget user notifications."""

    async def send(self, notification: Notification) -> None:
        """Deliver a notification to the account owner.

        Args:
            notification: Message to show.
        """
        ...


@runtime_checkable
class IMfaDeliveryHook(Protocol):
    """Protocol for out-of-band code delivery.

    Applications implement this to send codes via email or SMS. This
    package does NOT include email/SMS sending.
    """

    async def send_email_otp(self, email: str, code: str) -> None:
        """Send a code via email.

        Args:
            email: Recipient email address.
            code: The one-time code.
        """
        ...

    async def send_sms_otp(self, phone: str, code: str) -> None:
        """Send a code via SMS.

        Args:
            phone: Recipient phone number.
            code: The one-time code.
        """
        ...


@runtime_checkable
class IVerificationMethod(Protocol):
    """Protocol implemented once per verification method.

    Backends keep their state on the account passed in; the controller
    persists it.
    """

    @property
    def method_type(self) -> MethodType:
        """Method this backend implements."""
        ...

    async def enable(self, account: Account) -> MethodChallenge:
        """Create a pending secret for the account.

        Args:
            account: Account being enrolled.

        Returns:
            The challenge the owner has to answer.
        """
        ...

    async def confirm(self, account: Account, code: str) -> None:
        """Check a code against the pending secret.

        Args:
            account: Account being enrolled.
            code: Code typed by the owner.

        Raises:
            AuthenticationError: If the code is wrong, expired or malformed.
        """
        ...

    async def disable(self, account: Account) -> None:
        """Remove the method-specific secret.

        Args:
            account: Account being disabled.
        """
        ...


@runtime_checkable
class ITwoFactorAuditStore(Protocol):
    """Protocol for storing two-factor audit events."""

    async def record(self, event: TwoFactorAuditEvent) -> None:
        """Record an audit event.

        Args:
            event: The event to record.
        """
        ...


__all__: list[str] = [
    "IAccountRepository",
    "IPasswordConfirmer",
    "INotificationSink",
    "IMfaDeliveryHook",
    "IVerificationMethod",
    "ITwoFactorAuditStore",
]
