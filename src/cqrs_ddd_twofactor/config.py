"""Configuration for two-factor enrollment.

Plain frozen dataclasses. Applications build them directly or from a
settings mapping with ``TwoFactorConfig.from_mapping``.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .domain import MethodType
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


# Characters used in recovery codes (exclude ambiguous: 0, O, 1, I)
RECOVERY_CODE_ALPHABET = string.ascii_uppercase.replace("O", "").replace(
    "I", ""
) + string.digits.replace("0", "").replace("1", "")


def _require_at_least(section: str, **values: tuple[int, int]) -> None:
    for name, (value, minimum) in values.items():
        if value < minimum:
            raise ConfigurationError(
                f"{section}.{name} must be at least {minimum}, got {value}"
            )


@dataclass(frozen=True)
class OtpConfig:
    """Settings for codes delivered by email or SMS.

    Attributes:
        code_length: Number of digits in a delivered code.
        ttl_seconds: How long a delivered code stays valid.
        valid_window: Accept codes ±N periods to absorb delivery delay.
        cooldown_seconds: Minimum seconds between resends.
    """

    code_length: int = 6
    ttl_seconds: int = 300  # 5 minutes
    valid_window: int = 1
    cooldown_seconds: int = 60

    def __post_init__(self) -> None:
        _require_at_least("otp", code_length=(self.code_length, 1))
        _require_at_least("otp", ttl_seconds=(self.ttl_seconds, 1))
        _require_at_least("otp", valid_window=(self.valid_window, 0))
        _require_at_least("otp", cooldown_seconds=(self.cooldown_seconds, 0))


@dataclass(frozen=True)
class TotpConfig:
    """Settings for authenticator apps.

    Attributes:
        issuer: Application name shown in the authenticator app.
        digits: Number of digits in a code.
        interval: Time step in seconds.
        valid_window: Accept codes ±N intervals for clock drift.
    """

    issuer: str = "MyApp"
    digits: int = 6
    interval: int = 30
    valid_window: int = 1

    def __post_init__(self) -> None:
        _require_at_least("totp", digits=(self.digits, 1))
        _require_at_least("totp", interval=(self.interval, 1))
        _require_at_least("totp", valid_window=(self.valid_window, 0))


@dataclass(frozen=True)
class RecoveryCodeConfig:
    """Settings for recovery codes.

    Attributes:
        count: Codes per set.
        code_length: Characters per code, dashes excluded.
        group_size: Characters between dashes.
    """

    count: int = 8
    code_length: int = 12
    group_size: int = 4

    def __post_init__(self) -> None:
        _require_at_least("recovery_codes", count=(self.count, 1))
        _require_at_least("recovery_codes", code_length=(self.code_length, 1))
        _require_at_least("recovery_codes", group_size=(self.group_size, 1))
        # Generation draws until it has `count` distinct codes
        if len(RECOVERY_CODE_ALPHABET) ** self.code_length < self.count:
            raise ConfigurationError(
                f"recovery_codes.code_length={self.code_length} cannot produce "
                f"{self.count} distinct codes"
            )


def _parse_methods(values: Iterable[MethodType | str]) -> tuple[MethodType, ...]:
    methods: list[MethodType] = []
    for value in values:
        try:
            method = MethodType(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown two-factor method {value!r}; "
                f"expected one of {[m.value for m in MethodType]}"
            ) from e
        if method in methods:
            raise ConfigurationError(f"Two-factor method {method.value!r} listed twice")
        methods.append(method)
    return tuple(methods)


@dataclass(frozen=True)
class TwoFactorConfig:
    """Deployment-level two-factor settings.

    Attributes:
        methods: Enabled methods, in display order.
        require_confirmation: Whether enable must be followed by a confirm.
        otp: Email/SMS code settings.
        totp: Authenticator app settings.
        recovery_codes: Recovery code settings.
    """

    methods: tuple[MethodType, ...] = (
        MethodType.EMAIL,
        MethodType.PHONE,
        MethodType.AUTHENTICATOR,
    )
    require_confirmation: bool = True
    otp: OtpConfig = field(default_factory=OtpConfig)
    totp: TotpConfig = field(default_factory=TotpConfig)
    recovery_codes: RecoveryCodeConfig = field(default_factory=RecoveryCodeConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "methods", _parse_methods(self.methods))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TwoFactorConfig:
        """Build a config from a parsed settings mapping.

        Example:
            ```python
            config = TwoFactorConfig.from_mapping({
                "methods": ["email", "authenticator"],
                "require_confirmation": True,
                "totp": {"issuer": "Acme"},
            })
            ```

        Raises:
            ConfigurationError: On unknown keys or method names.
        """
        known = {"methods", "require_confirmation", "otp", "totp", "recovery_codes"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown two-factor settings: {sorted(unknown)}"
            )

        kwargs: dict[str, Any] = {}
        if "methods" in data:
            kwargs["methods"] = tuple(data["methods"])
        if "require_confirmation" in data:
            kwargs["require_confirmation"] = bool(data["require_confirmation"])
        try:
            if "otp" in data:
                kwargs["otp"] = OtpConfig(**data["otp"])
            if "totp" in data:
                kwargs["totp"] = TotpConfig(**data["totp"])
            if "recovery_codes" in data:
                kwargs["recovery_codes"] = RecoveryCodeConfig(**data["recovery_codes"])
        except TypeError as e:
            raise ConfigurationError(f"Invalid two-factor settings: {e}") from e
        return cls(**kwargs)


__all__: list[str] = [
    "RECOVERY_CODE_ALPHABET",
    "OtpConfig",
    "TotpConfig",
    "RecoveryCodeConfig",
    "TwoFactorConfig",
]
