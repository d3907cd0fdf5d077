"""Verification method backends.

Supports:
- Authenticator apps (TOTP, scanned from a QR code)
- Email codes (via application hook)
- SMS codes (via application hook)
"""

from .base import SecretBackedMethod
from .otp import (
    EmailMethod,
    InMemoryOtpRateLimitStore,
    IOtpRateLimitStore,
    OutOfBandMethod,
    PhoneMethod,
)
from .totp import AuthenticatorMethod

__all__: list[str] = [
    "SecretBackedMethod",
    "AuthenticatorMethod",
    "OutOfBandMethod",
    "EmailMethod",
    "PhoneMethod",
    "IOtpRateLimitStore",
    "InMemoryOtpRateLimitStore",
]
