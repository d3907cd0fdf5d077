"""Audit module for two-factor enrollment events."""

from __future__ import annotations

from .events import (
    TwoFactorAuditEvent,
    TwoFactorEventType,
    confirm_failed_event,
    confirmed_event,
    disabled_event,
    enabled_event,
    enrollment_discarded_event,
    password_failed_event,
    recovery_codes_downloaded_event,
    recovery_codes_regenerated_event,
)
from .memory import InMemoryTwoFactorAuditStore

__all__: list[str] = [
    # Event types and classes
    "TwoFactorEventType",
    "TwoFactorAuditEvent",
    # Event factory functions
    "enabled_event",
    "confirmed_event",
    "confirm_failed_event",
    "disabled_event",
    "enrollment_discarded_event",
    "recovery_codes_regenerated_event",
    "recovery_codes_downloaded_event",
    "password_failed_event",
    # Store implementations
    "InMemoryTwoFactorAuditStore",
]
