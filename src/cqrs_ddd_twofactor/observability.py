"""Prometheus metrics for two-factor enrollment.

Usage:
    ```python
    from cqrs_ddd_twofactor.observability import TwoFactorMetrics

    with TwoFactorMetrics.operation("confirm", method="authenticator"):
        await method.confirm(account, code)
    ```
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from prometheus_client import Counter, Histogram

from .exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator

    from .audit.events import TwoFactorAuditEvent

_logger = logging.getLogger(__name__)


class _TwoFactorMetricsRegistry:
    """Lazily creates the collectors on first use.

    Collectors register with the default Prometheus registry once per
    process.
    """

    def __init__(self) -> None:
        self._histogram: Any = None
        self._counter: Any = None
        self._events: Any = None
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        self._histogram = Histogram(
            "twofactor_operation_duration_seconds",
            "Two-factor enrollment operation duration",
            ["method", "operation"],
        )
        self._counter = Counter(
            "twofactor_operations_total",
            "Two-factor enrollment operation count",
            ["method", "operation", "result"],
        )
        self._events = Counter(
            "twofactor_audit_events_total",
            "Two-factor audit events",
            ["event_type", "result"],
        )
        self._initialized = True

    @property
    def histogram(self) -> Any:
        self._ensure_initialized()
        return self._histogram

    @property
    def counter(self) -> Any:
        self._ensure_initialized()
        return self._counter

    @property
    def events(self) -> Any:
        self._ensure_initialized()
        return self._events


# Global registry instance
_registry = _TwoFactorMetricsRegistry()


class TwoFactorMetrics:
    """Helpers for recording enrollment metrics."""

    @staticmethod
    @contextmanager
    def operation(
        operation: str,
        *,
        method: str | None = None,
    ) -> Generator[None, None, None]:
        """Time an operation and count its outcome.

        Outcomes are ``success``, ``rejected`` (ValidationError) or
        ``error`` (anything else).

        Args:
            operation: Operation name (enable, confirm, disable, ...).
            method: Verification method, if known.
        """
        result = "success"
        start = time.monotonic()
        try:
            yield
        except ValidationError:
            result = "rejected"
            raise
        except Exception:
            result = "error"
            raise
        finally:
            duration = time.monotonic() - start
            labels = {"method": method or "none", "operation": operation}
            try:
                _registry.histogram.labels(**labels).observe(duration)
                _registry.counter.labels(**labels, result=result).inc()
            except Exception:
                _logger.debug("Failed to record metrics for %s", operation)

    @staticmethod
    def record_event(event: TwoFactorAuditEvent) -> None:
        """Count an audit event."""
        try:
            _registry.events.labels(
                event_type=event.event_type.value,
                result="success" if event.success else "failure",
            ).inc()
        except Exception:
            _logger.debug("Failed to record audit event metric")


__all__: list[str] = ["TwoFactorMetrics"]
