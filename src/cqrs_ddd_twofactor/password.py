"""Password re-authentication.

Disabling two-factor authentication and regenerating recovery codes both
require the owner to type their current password again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

import bcrypt

from .ports import IPasswordConfirmer

if TYPE_CHECKING:
    from .domain import Account

logger = logging.getLogger(__name__)


class PasswordHasher:
    """bcrypt password hasher.

    Example:
        ```python
        hasher = PasswordHasher()
        account.password_hash = hasher.hash("user_password")

        if hasher.verify(account.password_hash, "user_password"):
            ...
        ```
    """

    def __init__(self, *, rounds: int = 12) -> None:
        """Initialize the hasher.

        Args:
            rounds: bcrypt cost factor (default 12).
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode(), salt).decode()

    def verify(self, hashed_password: str, password: str) -> bool:
        """Check a password against a stored hash.

        Returns:
            True if the password matches; False on mismatch or a malformed
            hash.
        """
        try:
            return cast(
                "bool", bcrypt.checkpw(password.encode(), hashed_password.encode())
            )
        except ValueError:
            # Invalid hash format or malformed hash
            return False


class HashedPasswordConfirmer(IPasswordConfirmer):
    """Confirms the owner's password against ``Account.password_hash``."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.hasher = hasher or PasswordHasher()

    async def confirm(self, account: Account, password: str) -> bool:
        if not password or not account.password_hash:
            return False
        verified = self.hasher.verify(account.password_hash, password)
        if not verified:
            logger.info("Password confirmation failed for account %s", account.id)
        return verified


__all__: list[str] = ["PasswordHasher", "HashedPasswordConfirmer"]
