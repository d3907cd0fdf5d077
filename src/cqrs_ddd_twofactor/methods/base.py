"""Shared machinery for secret-backed verification methods.

Every method keeps a base32 secret in ``Account.verification_secret`` and
checks codes with pyotp. Subclasses only differ in how the owner receives
the first code: scanned from a QR code or delivered out of band.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pyotp

from ..exceptions import InvalidCodeError

if TYPE_CHECKING:
    from ..domain import Account, MethodChallenge, MethodType

logger = logging.getLogger(__name__)


class SecretBackedMethod:
    """Base class for methods whose codes derive from a stored secret.

    Args:
        digits: Number of digits in a code.
        interval: Period in seconds a code stays current.
        valid_window: Accept codes ±N periods.
    """

    method_type: MethodType

    def __init__(self, *, digits: int, interval: int, valid_window: int) -> None:
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window

    def _new_secret(self, account: Account) -> str:
        """Generate a secret and store it on the account."""
        secret = pyotp.random_base32()
        account.verification_secret = secret
        return secret

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def _normalize_code(self, code: str) -> str:
        """Strip whitespace and dashes people type for readability."""
        return code.replace(" ", "").replace("-", "").strip()

    async def enable(self, account: Account) -> MethodChallenge:
        raise NotImplementedError

    async def confirm(self, account: Account, code: str) -> None:
        """Verify a code against the account's pending secret.

        Raises:
            InvalidCodeError: If no secret is pending, the code is malformed,
                or it does not match within the valid window.
        """
        secret = account.verification_secret
        if not secret:
            raise InvalidCodeError("No pending secret for this account")

        normalized = self._normalize_code(code)
        if len(normalized) != self.digits or not normalized.isdigit():
            raise InvalidCodeError(f"Code must be {self.digits} digits")

        if not self._totp(secret).verify(normalized, valid_window=self.valid_window):
            raise InvalidCodeError("Invalid or expired code")

        logger.debug(
            "Code accepted for account %s (%s)", account.id, self.method_type.value
        )

    async def disable(self, account: Account) -> None:
        """Remove the secret from the account."""
        account.verification_secret = None

    def current_code(self, account: Account) -> str | None:
        """Return the code that is valid right now.

        Used to deliver codes out of band and in tests. Returns None if the
        account has no secret.
        """
        if not account.verification_secret:
            return None
        return self._totp(account.verification_secret).now()


__all__: list[str] = ["SecretBackedMethod"]
