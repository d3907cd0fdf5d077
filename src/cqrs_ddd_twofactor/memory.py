"""Dict-backed account repository for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .ports import IAccountRepository

if TYPE_CHECKING:
    from .domain import Account


class InMemoryAccountRepository(IAccountRepository):
    """In-memory implementation of ``IAccountRepository``.

    Stores deep copies so callers only see changes after ``save``, the
    same way a database-backed repository behaves.
    """

    def __init__(self) -> None:
        self._store: dict[str, Account] = {}

    async def get(self, account_id: str) -> Account | None:
        account = self._store.get(account_id)
        return account.model_copy(deep=True) if account is not None else None

    async def save(self, account: Account) -> None:
        self._store[account.id] = account.model_copy(deep=True)

    # ── Test helpers ─────────────────────────────────────────────

    def add(self, account: Account) -> None:
        self._store[account.id] = account.model_copy(deep=True)

    def clear(self) -> None:
        self._store.clear()


__all__: list[str] = ["InMemoryAccountRepository"]
