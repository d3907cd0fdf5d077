"""Recovery codes for two-factor authentication.

Recovery codes let the owner sign in when the primary method is out of
reach. Codes are single-use and always issued as a full set: generating a
new set invalidates every code of the previous one.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from .config import RECOVERY_CODE_ALPHABET, RecoveryCodeConfig

if TYPE_CHECKING:
    from .domain import Account


class RecoveryCodeStore:
    """Generates and tracks recovery codes on the account record.

    The store mutates ``Account.recovery_codes`` in memory; persisting the
    account is the caller's job, so a regenerate is one atomic write.

    Example:
        ```python
        store = RecoveryCodeStore()
        codes = store.generate(account)
        await accounts.save(account)

        if store.consume(account, "ABCD-EFGH-JKLM"):
            await accounts.save(account)
        ```
    """

    ALPHABET = RECOVERY_CODE_ALPHABET

    def __init__(self, config: RecoveryCodeConfig | None = None) -> None:
        self.config = config or RecoveryCodeConfig()

    def _generate_code(self) -> str:
        return "".join(
            secrets.choice(self.ALPHABET) for _ in range(self.config.code_length)
        )

    def _format_code(self, code: str) -> str:
        """Insert dashes for readability (e.g. "ABCD-EFGH-JKLM")."""
        size = self.config.group_size
        return "-".join(code[i : i + size] for i in range(0, len(code), size))

    def _normalize_code(self, code: str) -> str:
        """Accept input with or without dashes, any case."""
        raw = code.strip().upper().replace("-", "").replace(" ", "")
        return self._format_code(raw)

    def generate(self, account: Account) -> list[str]:
        """Replace the account's recovery codes with a fresh set.

        Args:
            account: Account to issue codes for.

        Returns:
            The new codes, in display order.
        """
        codes: list[str] = []
        while len(codes) < self.config.count:
            code = self._format_code(self._generate_code())
            if code not in codes:
                codes.append(code)
        account.recovery_codes = codes
        return list(codes)

    def export(self, account: Account) -> list[str]:
        """Return a copy of the current codes; empty if none were issued."""
        return list(account.recovery_codes or [])

    def consume(self, account: Account, code: str) -> bool:
        """Use up a recovery code.

        Args:
            account: Account the code belongs to.
            code: Code typed by the owner.

        Returns:
            True if the code was valid and has been removed.
        """
        current = account.recovery_codes
        if not current:
            return False
        normalized = self._normalize_code(code).encode()
        match = next(
            (c for c in current if secrets.compare_digest(c.encode(), normalized)),
            None,
        )
        if match is None:
            return False
        account.recovery_codes = [c for c in current if c != match]
        return True

    def remaining(self, account: Account) -> int:
        return len(account.recovery_codes or [])


__all__: list[str] = ["RecoveryCodeStore"]
