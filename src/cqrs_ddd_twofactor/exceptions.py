"""Two-factor enrollment exceptions.

All errors inherit from TwoFactorError so applications can catch the whole
package with a single clause. ValidationError is user-facing, the rest are
operator- or backend-facing.
"""

from __future__ import annotations

# ═══════════════════════════════════════════════════════════════
# BASE ERROR
# ═══════════════════════════════════════════════════════════════


class TwoFactorError(Exception):
    """Root exception for the two-factor enrollment package."""


# ═══════════════════════════════════════════════════════════════
# USER-FACING ERRORS
# ═══════════════════════════════════════════════════════════════


class ValidationError(TwoFactorError):
    """Raised when user input is rejected.

    Carries structured errors: ``{field: [messages]}``. Messages are safe to
    show verbatim to the account owner.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        """Build an error scoped to a single form field."""
        return cls({field: [message]})

    @property
    def field(self) -> str | None:
        """Name of the first field carrying an error."""
        return next(iter(self.errors), None)

    @property
    def message(self) -> str | None:
        """First message of the first field."""
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None


class AccountNotFoundError(TwoFactorError):
    """Raised when the account referenced by a session does not exist."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account with id={account_id!r} not found")


# ═══════════════════════════════════════════════════════════════
# OPERATOR-FACING ERRORS
# ═══════════════════════════════════════════════════════════════


class ConfigurationError(TwoFactorError):
    """Raised on deployment misconfiguration.

    Examples:
        - Selecting or enabling a method that is not configured
        - A configured method without a registered backend
        - An unknown method name in the settings mapping
    """


# ═══════════════════════════════════════════════════════════════
# BACKEND ERRORS
# ═══════════════════════════════════════════════════════════════


class AuthenticationError(TwoFactorError):
    """Raised by verification backends when a code cannot be accepted.

    The enrollment controller never lets this reach the account owner;
    it is remapped to a uniform ValidationError.
    """


class InvalidCodeError(AuthenticationError):
    """Raised when a code is wrong, expired, malformed or not pending."""


class ResendTooSoonError(AuthenticationError):
    """Raised when a code is re-delivered before the cooldown elapsed.

    Attributes:
        retry_after: Seconds left until a new code may be sent.
    """

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(
            f"Please wait {retry_after} seconds before requesting a new code"
        )


__all__: list[str] = [
    "TwoFactorError",
    "ValidationError",
    "AccountNotFoundError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidCodeError",
    "ResendTooSoonError",
]
