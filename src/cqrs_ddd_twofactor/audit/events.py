"""Audit events for two-factor enrollment.

Standardized events for tracking changes to an account's second factor.
Events never carry codes, secrets or backend error details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TwoFactorEventType(Enum):
    """Types of two-factor audit events.

    Event naming follows the pattern: `auth.mfa.<action>`
    """

    ENABLED = "auth.mfa.enabled"
    CONFIRMED = "auth.mfa.confirmed"
    CONFIRM_FAILED = "auth.mfa.confirm_failed"
    DISABLED = "auth.mfa.disabled"
    ENROLLMENT_DISCARDED = "auth.mfa.enrollment_discarded"
    RECOVERY_CODES_REGENERATED = "auth.mfa.recovery_codes_regenerated"
    RECOVERY_CODES_DOWNLOADED = "auth.mfa.recovery_codes_downloaded"
    PASSWORD_FAILED = "auth.mfa.password_failed"  # noqa: S105


@dataclass(frozen=True)
class TwoFactorAuditEvent:
    """Two-factor audit event.

    Attributes:
        event_type: The type of event.
        account_id: The account the event concerns.
        method: Verification method involved, if any.
        timestamp: When the event occurred (UTC).
        success: Whether the operation was successful.
        error_code: Error code if the operation failed.
        metadata: Additional event-specific data.
    """

    event_type: TwoFactorEventType
    account_id: str
    method: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool = True
    error_code: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.success and not self.error_code:
            object.__setattr__(self, "error_code", "UNKNOWN_ERROR")

    def to_dict(self) -> dict[str, Any]:
        """Convert event to a JSON-serializable dictionary."""
        return {
            "event_type": self.event_type.value,
            "account_id": self.account_id,
            "method": self.method,
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "error_code": self.error_code,
            "metadata": self.metadata,
        }


# ═══════════════════════════════════════════════════════════════
# EVENT FACTORY FUNCTIONS
# ═══════════════════════════════════════════════════════════════


def enabled_event(
    account_id: str, method: str, *, confirmed: bool
) -> TwoFactorAuditEvent:
    """Create an event for a method being enabled."""
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.ENABLED,
        account_id=account_id,
        method=method,
        metadata={"confirmed": confirmed},
    )


def confirmed_event(account_id: str, method: str) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.CONFIRMED,
        account_id=account_id,
        method=method,
    )


def confirm_failed_event(account_id: str, method: str | None) -> TwoFactorAuditEvent:
    """Create an event for a rejected code.

    The reason is deliberately not recorded.
    """
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.CONFIRM_FAILED,
        account_id=account_id,
        method=method,
        success=False,
        error_code="INVALID_CODE",
    )


def disabled_event(
    account_id: str, method: str | None, *, was_confirmed: bool
) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.DISABLED,
        account_id=account_id,
        method=method,
        metadata={"was_confirmed": was_confirmed},
    )


def enrollment_discarded_event(
    account_id: str, method: str | None
) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.ENROLLMENT_DISCARDED,
        account_id=account_id,
        method=method,
    )


def recovery_codes_regenerated_event(
    account_id: str, method: str | None, *, count: int
) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.RECOVERY_CODES_REGENERATED,
        account_id=account_id,
        method=method,
        metadata={"count": count},
    )


def recovery_codes_downloaded_event(
    account_id: str, method: str | None
) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.RECOVERY_CODES_DOWNLOADED,
        account_id=account_id,
        method=method,
    )


def password_failed_event(account_id: str, *, operation: str) -> TwoFactorAuditEvent:
    return TwoFactorAuditEvent(
        event_type=TwoFactorEventType.PASSWORD_FAILED,
        account_id=account_id,
        success=False,
        error_code="INVALID_PASSWORD",
        metadata={"operation": operation},
    )


__all__: list[str] = [
    "TwoFactorEventType",
    "TwoFactorAuditEvent",
    "enabled_event",
    "confirmed_event",
    "confirm_failed_event",
    "disabled_event",
    "enrollment_discarded_event",
    "recovery_codes_regenerated_event",
    "recovery_codes_downloaded_event",
    "password_failed_event",
]
