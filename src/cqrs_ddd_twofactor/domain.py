"""Domain types for two-factor enrollment.

``Account`` is the persistent record the enrollment controller reads and
mutates. Everything else here is a value type shared between the
controller, the method backends and the recovery code store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class MethodType(str, Enum):
    """Verification methods a deployment can offer."""

    EMAIL = "email"
    PHONE = "phone"
    AUTHENTICATOR = "authenticator"

    @property
    def label(self) -> str:
        """Display label for the method selection form."""
        return _METHOD_LABELS[self]

    @property
    def delivered_out_of_band(self) -> bool:
        """Whether codes are sent to the owner instead of scanned."""
        return self in (MethodType.EMAIL, MethodType.PHONE)


_METHOD_LABELS: dict[MethodType, str] = {
    MethodType.EMAIL: "Email",
    MethodType.PHONE: "Phone",
    MethodType.AUTHENTICATOR: "Authenticator app",
}


class EnrollmentState(Enum):
    """Where an account stands in the enrollment lifecycle."""

    DISABLED = "disabled"
    ENROLLING = "enrolling"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"


class Account(BaseModel):
    """Account fields owned by two-factor enrollment.

    Attributes:
        id: Account identifier.
        email: Delivery target for the email method.
        phone: Delivery target for the phone method (E.164).
        password_hash: bcrypt hash used for re-authentication.
        verification_secret: Base32 secret backing the active method.
        method_type: Active method, None while disabled.
        confirmed_at: When the method was confirmed (timezone-aware UTC).
        recovery_codes: Current recovery code set, None while disabled.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    email: str | None = None
    phone: str | None = None
    password_hash: str | None = None
    verification_secret: str | None = None
    method_type: MethodType | None = None
    confirmed_at: datetime | None = None
    recovery_codes: list[str] | None = None

    @property
    def is_enrolled(self) -> bool:
        return self.method_type is not None

    @property
    def is_confirmed(self) -> bool:
        return self.confirmed_at is not None

    def clear_two_factor(self) -> None:
        """Drop every two-factor field at once."""
        self.verification_secret = None
        self.method_type = None
        self.confirmed_at = None
        self.recovery_codes = None


@dataclass(frozen=True)
class MethodChallenge:
    """What the owner needs to finish enrolling a method.

    Attributes:
        method_type: Method that produced the challenge.
        visual: True when the challenge is meant to be scanned (QR code).
        provisioning_uri: otpauth:// URI for QR rendering.
        manual_key: Secret grouped for manual entry.
        delivered_to: Email address or phone number a code was sent to.
    """

    method_type: MethodType
    visual: bool = False
    provisioning_uri: str | None = None
    manual_key: str | None = None
    delivered_to: str | None = None


__all__: list[str] = [
    "MethodType",
    "EnrollmentState",
    "Account",
    "MethodChallenge",
]
