"""CQRS-DDD Two-Factor Package

Enrollment: "Prove it's still you."

Lets account owners pick a verification method, enroll and confirm it,
manage recovery codes and turn two-factor authentication off again.

Usage:
    ```python
    from cqrs_ddd_twofactor import (
        EnrollmentController,
        HashedPasswordConfirmer,
        MethodRegistry,
        MethodType,
        TwoFactorConfig,
    )

    config = TwoFactorConfig(methods=(MethodType.EMAIL, MethodType.AUTHENTICATOR))
    controller = EnrollmentController(
        accounts=account_repository,
        registry=MethodRegistry.from_config(config, delivery_hook=hook),
        password_confirmer=HashedPasswordConfirmer(),
        config=config,
    )

    session = await controller.open_session("account-123")
    await controller.select_method(session, MethodType.AUTHENTICATOR)
    challenge = await controller.enable(session)
    await controller.confirm(session, code_from_app)
    ```

Submodules:
    - `methods`: authenticator, email and SMS verification backends
    - `audit`: audit events and in-memory store
    - `observability`: Prometheus metrics
    - `contrib.fastapi`: download response and exception handlers
"""

from __future__ import annotations

# Audit
from .audit import (
    InMemoryTwoFactorAuditStore,
    TwoFactorAuditEvent,
    TwoFactorEventType,
)

# Configuration
from .config import OtpConfig, RecoveryCodeConfig, TotpConfig, TwoFactorConfig

# Controller
from .controller import (
    INVALID_CODE_MESSAGE,
    INVALID_PASSWORD_MESSAGE,
    EnableForm,
    EnrollmentController,
    EnrollmentSession,
    EnrollmentView,
    RecoveryCodesAttachment,
)

# Domain
from .domain import Account, EnrollmentState, MethodChallenge, MethodType

# Exceptions
from .exceptions import (
    AccountNotFoundError,
    AuthenticationError,
    ConfigurationError,
    InvalidCodeError,
    ResendTooSoonError,
    TwoFactorError,
    ValidationError,
)

# Adapters
from .memory import InMemoryAccountRepository

# Methods
from .methods import AuthenticatorMethod, EmailMethod, PhoneMethod
from .notifications import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
    Notification,
    NotificationLevel,
)
from .password import HashedPasswordConfirmer, PasswordHasher

# Ports
from .ports import (
    IAccountRepository,
    IMfaDeliveryHook,
    INotificationSink,
    IPasswordConfirmer,
    ITwoFactorAuditStore,
    IVerificationMethod,
)
from .recovery import RecoveryCodeStore
from .registry import MethodRegistry

__version__ = "0.1.0"

__all__: list[str] = [
    # Domain
    "Account",
    "EnrollmentState",
    "MethodChallenge",
    "MethodType",
    # Configuration
    "TwoFactorConfig",
    "OtpConfig",
    "TotpConfig",
    "RecoveryCodeConfig",
    # Controller
    "EnrollmentController",
    "EnrollmentSession",
    "EnrollmentView",
    "EnableForm",
    "RecoveryCodesAttachment",
    "INVALID_CODE_MESSAGE",
    "INVALID_PASSWORD_MESSAGE",
    # Registry & recovery codes
    "MethodRegistry",
    "RecoveryCodeStore",
    # Methods
    "AuthenticatorMethod",
    "EmailMethod",
    "PhoneMethod",
    # Ports
    "IAccountRepository",
    "IPasswordConfirmer",
    "INotificationSink",
    "IMfaDeliveryHook",
    "IVerificationMethod",
    "ITwoFactorAuditStore",
    # Adapters
    "InMemoryAccountRepository",
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
    "Notification",
    "NotificationLevel",
    "HashedPasswordConfirmer",
    "PasswordHasher",
    # Audit
    "TwoFactorAuditEvent",
    "TwoFactorEventType",
    "InMemoryTwoFactorAuditStore",
    # Exceptions
    "TwoFactorError",
    "ValidationError",
    "AccountNotFoundError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidCodeError",
    "ResendTooSoonError",
]
