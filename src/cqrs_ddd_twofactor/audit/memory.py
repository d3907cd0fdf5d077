"""In-memory audit store for testing and development."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from ..ports import ITwoFactorAuditStore

if TYPE_CHECKING:
    from .events import TwoFactorAuditEvent, TwoFactorEventType


class InMemoryTwoFactorAuditStore(ITwoFactorAuditStore):
    """In-memory implementation of ITwoFactorAuditStore.

    Note:
        Events are stored in memory and will be lost on restart.
        Not suitable for production use.
    """

    def __init__(self) -> None:
        self._events: list[TwoFactorAuditEvent] = []
        self._by_account: dict[str, list[int]] = defaultdict(list)

    async def record(self, event: TwoFactorAuditEvent) -> None:
        index = len(self._events)
        self._events.append(event)
        self._by_account[event.account_id].append(index)

    async def get_events(
        self,
        account_id: str,
        *,
        event_types: list[TwoFactorEventType] | None = None,
        limit: int = 100,
    ) -> list[TwoFactorAuditEvent]:
        """Get audit events for an account, most recent first.

        Args:
            account_id: Account to query.
            event_types: Optional filter by event types.
            limit: Maximum number of events to return.
        """
        results: list[TwoFactorAuditEvent] = []
        for idx in reversed(self._by_account.get(account_id, [])):
            event = self._events[idx]
            if event_types and event.event_type not in event_types:
                continue
            results.append(event)
            if len(results) >= limit:
                break
        return results

    @property
    def events(self) -> list[TwoFactorAuditEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()
        self._by_account.clear()


__all__: list[str] = ["InMemoryTwoFactorAuditStore"]
