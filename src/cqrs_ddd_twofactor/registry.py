"""Registry of the verification methods a deployment offers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .domain import MethodType
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .config import TwoFactorConfig
    from .ports import IMfaDeliveryHook, IVerificationMethod


class MethodRegistry:
    """Maps enabled method types to their backends.

    Only methods listed in the configuration are exposed, in configuration
    order. Lookups of anything else fail closed with ConfigurationError;
    there is no fallback method.

    Example:
        ```python
        registry = MethodRegistry(
            [MethodType.EMAIL, MethodType.AUTHENTICATOR],
            {
                MethodType.EMAIL: EmailMethod(delivery_hook=hook),
                MethodType.AUTHENTICATOR: AuthenticatorMethod(),
            },
        )

        registry.options()  # [("email", "Email"), ("authenticator", "Authenticator app")]
        method = registry.resolve("authenticator")
        ```
    """

    def __init__(
        self,
        enabled: Iterable[MethodType],
        backends: Mapping[MethodType, IVerificationMethod],
    ) -> None:
        """Initialize the registry.

        Args:
            enabled: Enabled methods, in display order.
            backends: Backend per method; may contain extra entries.

        Raises:
            ConfigurationError: If an enabled method has no backend or a
                backend is registered under the wrong type.
        """
        self._enabled: tuple[MethodType, ...] = tuple(enabled)
        self._backends: dict[MethodType, IVerificationMethod] = {}

        for method_type in self._enabled:
            backend = backends.get(method_type)
            if backend is None:
                raise ConfigurationError(
                    f"Two-factor method {method_type.value!r} is enabled "
                    "but no backend is registered for it"
                )
            if backend.method_type is not method_type:
                raise ConfigurationError(
                    f"Backend for {method_type.value!r} implements "
                    f"{backend.method_type.value!r}"
                )
            self._backends[method_type] = backend

    @classmethod
    def from_config(
        cls,
        config: TwoFactorConfig,
        *,
        delivery_hook: IMfaDeliveryHook | None = None,
        backends: Mapping[MethodType, IVerificationMethod] | None = None,
    ) -> MethodRegistry:
        """Build a registry with the bundled backends.

        Email and phone need a delivery hook; explicitly passed ``backends``
        override the bundled ones.

        Raises:
            ConfigurationError: If email or phone is enabled without a hook.
        """
        from .methods import AuthenticatorMethod, EmailMethod, PhoneMethod

        resolved: dict[MethodType, IVerificationMethod] = dict(backends or {})
        for method_type in config.methods:
            if method_type in resolved:
                continue
            if method_type is MethodType.AUTHENTICATOR:
                resolved[method_type] = AuthenticatorMethod(config.totp)
                continue
            if delivery_hook is None:
                raise ConfigurationError(
                    f"Two-factor method {method_type.value!r} requires a delivery hook"
                )
            if method_type is MethodType.EMAIL:
                resolved[method_type] = EmailMethod(
                    delivery_hook=delivery_hook, config=config.otp
                )
            else:
                resolved[method_type] = PhoneMethod(
                    delivery_hook=delivery_hook, config=config.otp
                )
        return cls(config.methods, resolved)

    @property
    def enabled(self) -> tuple[MethodType, ...]:
        return self._enabled

    def options(self) -> list[tuple[str, str]]:
        """Return ``(value, label)`` pairs for the selection form."""
        return [(m.value, m.label) for m in self._enabled]

    def is_enabled(self, method_type: MethodType | str) -> bool:
        try:
            return MethodType(method_type) in self._backends
        except ValueError:
            return False

    def resolve(self, method_type: MethodType | str | None) -> IVerificationMethod:
        """Return the backend for an enabled method.

        Args:
            method_type: Method enum or its raw value.

        Raises:
            ConfigurationError: If the method is unknown, missing or not
                enabled.
        """
        if method_type is None:
            raise ConfigurationError("No two-factor method was selected")
        try:
            key = MethodType(method_type)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown two-factor method {method_type!r}"
            ) from e
        backend = self._backends.get(key)
        if backend is None:
            raise ConfigurationError(
                f"Two-factor method {key.value!r} is not enabled; "
                f"enabled methods: {[m.value for m in self._enabled]}"
            )
        return backend


__all__: list[str] = ["MethodRegistry"]
