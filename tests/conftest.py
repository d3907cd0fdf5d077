"""Test configuration and fixtures."""

from __future__ import annotations

import pyotp
import pytest

from cqrs_ddd_twofactor import (
    Account,
    EnrollmentController,
    HashedPasswordConfirmer,
    InMemoryAccountRepository,
    InMemoryNotificationSink,
    InMemoryTwoFactorAuditStore,
    MethodRegistry,
    MethodType,
    PasswordHasher,
    TwoFactorConfig,
)

PASSWORD = "correct horse battery staple"  # noqa: S105
ACCOUNT_ID = "account-123"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests that require external services",
    )


class MockDeliveryHook:
    """Mock delivery hook for testing."""

    def __init__(self) -> None:
        self.emails_sent: list[tuple[str, str]] = []
        self.sms_sent: list[tuple[str, str]] = []

    async def send_email_otp(self, email: str, code: str) -> None:
        self.emails_sent.append((email, code))

    async def send_sms_otp(self, phone: str, code: str) -> None:
        self.sms_sent.append((phone, code))

    @property
    def last_code(self) -> str:
        sent = self.emails_sent + self.sms_sent
        return sent[-1][1]


def current_totp(account: Account) -> str:
    """Code an authenticator app would show right now."""
    assert account.verification_secret is not None
    return pyotp.TOTP(account.verification_secret).now()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def password_hash(hasher: PasswordHasher) -> str:
    return hasher.hash(PASSWORD)


@pytest.fixture
def account(password_hash: str) -> Account:
    return Account(
        id=ACCOUNT_ID,
        email="owner@example.com",
        phone="+15550001111",
        password_hash=password_hash,
    )


@pytest.fixture
def accounts(account: Account) -> InMemoryAccountRepository:
    repo = InMemoryAccountRepository()
    repo.add(account)
    return repo


@pytest.fixture
def delivery_hook() -> MockDeliveryHook:
    return MockDeliveryHook()


@pytest.fixture
def notifications() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def audit_store() -> InMemoryTwoFactorAuditStore:
    return InMemoryTwoFactorAuditStore()


@pytest.fixture
def make_controller(
    accounts: InMemoryAccountRepository,
    delivery_hook: MockDeliveryHook,
    notifications: InMemoryNotificationSink,
    audit_store: InMemoryTwoFactorAuditStore,
    hasher: PasswordHasher,
):
    """Build a controller for a given set of methods and confirmation flag."""

    def factory(
        methods: tuple[MethodType, ...] = (
            MethodType.EMAIL,
            MethodType.PHONE,
            MethodType.AUTHENTICATOR,
        ),
        *,
        require_confirmation: bool = True,
        backends=None,
    ) -> EnrollmentController:
        config = TwoFactorConfig(
            methods=methods, require_confirmation=require_confirmation
        )
        return EnrollmentController(
            accounts=accounts,
            registry=MethodRegistry.from_config(
                config, delivery_hook=delivery_hook, backends=backends
            ),
            password_confirmer=HashedPasswordConfirmer(hasher),
            config=config,
            notifications=notifications,
            audit_store=audit_store,
        )

    return factory


@pytest.fixture
def controller(make_controller) -> EnrollmentController:
    return make_controller()


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def totp_now():
    return current_totp
