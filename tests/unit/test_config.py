"""Tests for two-factor configuration."""

from __future__ import annotations

import dataclasses

import pytest

from cqrs_ddd_twofactor import (
    ConfigurationError,
    MethodType,
    OtpConfig,
    RecoveryCodeConfig,
    TotpConfig,
    TwoFactorConfig,
)


class TestDefaults:
    def test_all_methods_enabled_by_default(self) -> None:
        config = TwoFactorConfig()

        assert config.methods == (
            MethodType.EMAIL,
            MethodType.PHONE,
            MethodType.AUTHENTICATOR,
        )
        assert config.require_confirmation is True

    def test_sub_configs(self) -> None:
        config = TwoFactorConfig()

        assert config.otp == OtpConfig()
        assert config.totp.digits == 6
        assert config.totp.interval == 30
        assert config.recovery_codes.count == 8

    def test_config_is_frozen(self) -> None:
        config = TwoFactorConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.require_confirmation = False  # type: ignore[misc]


class TestMethods:
    def test_raw_values_are_parsed(self) -> None:
        config = TwoFactorConfig(methods=("authenticator", "email"))  # type: ignore[arg-type]

        assert config.methods == (MethodType.AUTHENTICATOR, MethodType.EMAIL)

    def test_unknown_method_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown two-factor method"):
            TwoFactorConfig(methods=("email", "fax"))  # type: ignore[arg-type]

    def test_duplicate_method_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="listed twice"):
            TwoFactorConfig(methods=(MethodType.EMAIL, MethodType.EMAIL))

    def test_empty_method_list_is_allowed(self) -> None:
        assert TwoFactorConfig(methods=()).methods == ()


class TestFromMapping:
    def test_full_mapping(self) -> None:
        config = TwoFactorConfig.from_mapping(
            {
                "methods": ["email", "authenticator"],
                "require_confirmation": False,
                "otp": {"ttl_seconds": 600},
                "totp": {"issuer": "Acme"},
                "recovery_codes": {"count": 10},
            }
        )

        assert config.methods == (MethodType.EMAIL, MethodType.AUTHENTICATOR)
        assert config.require_confirmation is False
        assert config.otp == OtpConfig(ttl_seconds=600)
        assert config.totp == TotpConfig(issuer="Acme")
        assert config.recovery_codes == RecoveryCodeConfig(count=10)

    def test_empty_mapping_uses_defaults(self) -> None:
        assert TwoFactorConfig.from_mapping({}) == TwoFactorConfig()

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown two-factor settings"):
            TwoFactorConfig.from_mapping({"methods": ["email"], "fallback": "sms"})

    def test_unknown_sub_setting_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid two-factor settings"):
            TwoFactorConfig.from_mapping({"totp": {"algorithm": "sha256"}})

    def test_unknown_method_in_mapping_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TwoFactorConfig.from_mapping({"methods": ["carrier-pigeon"]})


class TestValidation:
    @pytest.mark.parametrize(
        "settings",
        [
            {"count": 0},
            {"code_length": 0},
            {"group_size": 0},
            {"count": 40, "code_length": 1},
        ],
    )
    def test_unusable_recovery_code_settings(self, settings) -> None:
        with pytest.raises(ConfigurationError, match="recovery_codes"):
            RecoveryCodeConfig(**settings)

    def test_recovery_code_space_may_be_exactly_count(self) -> None:
        config = RecoveryCodeConfig(count=32, code_length=1, group_size=1)

        assert config.count == 32

    @pytest.mark.parametrize(
        "settings",
        [
            {"ttl_seconds": 0},
            {"code_length": 0},
            {"valid_window": -1},
            {"cooldown_seconds": -5},
        ],
    )
    def test_unusable_otp_settings(self, settings) -> None:
        with pytest.raises(ConfigurationError, match="otp"):
            OtpConfig(**settings)

    @pytest.mark.parametrize("settings", [{"interval": 0}, {"digits": 0}])
    def test_unusable_totp_settings(self, settings) -> None:
        with pytest.raises(ConfigurationError, match="totp"):
            TotpConfig(**settings)

    @pytest.mark.parametrize(
        "mapping",
        [
            {"recovery_codes": {"count": 40, "code_length": 1}},
            {"otp": {"ttl_seconds": 0}},
            {"totp": {"interval": 0}},
        ],
    )
    def test_from_mapping_rejects_unusable_settings(self, mapping) -> None:
        with pytest.raises(ConfigurationError):
            TwoFactorConfig.from_mapping(mapping)
