"""Two-factor enrollment controller.

Drives an account through::

    DISABLED → ENROLLING → AWAITING_CONFIRMATION → CONFIRMED
                        ↘──────────────────────↗ (confirmation step off)

``disable`` returns to DISABLED from any state. Every operation receives the
session explicitly; the session names the account, there is no ambient
current-user lookup. Each operation loads the account once and saves it at
most once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from .audit.events import (
    confirm_failed_event,
    confirmed_event,
    disabled_event,
    enabled_event,
    enrollment_discarded_event,
    password_failed_event,
    recovery_codes_downloaded_event,
    recovery_codes_regenerated_event,
)
from .config import TwoFactorConfig
from .domain import EnrollmentState, MethodChallenge, MethodType
from .exceptions import (
    AccountNotFoundError,
    AuthenticationError,
    ConfigurationError,
    ResendTooSoonError,
    ValidationError,
)
from .notifications import (
    activated_notification,
    deactivated_notification,
    mandatory_notification,
)
from .observability import TwoFactorMetrics
from .recovery import RecoveryCodeStore

if TYPE_CHECKING:
    from .audit.events import TwoFactorAuditEvent
    from .domain import Account
    from .notifications import Notification
    from .ports import (
        IAccountRepository,
        INotificationSink,
        IPasswordConfirmer,
        ITwoFactorAuditStore,
        IVerificationMethod,
    )
    from .registry import MethodRegistry

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "The code you entered is invalid."
INVALID_PASSWORD_MESSAGE = "The password is incorrect."  # noqa: S105
RECOVERY_CODES_FILENAME = "recovery-codes.txt"


# ═══════════════════════════════════════════════════════════════
# SESSION & RESULTS
# ═══════════════════════════════════════════════════════════════


@dataclass
class EnrollmentSession:
    """Per-visit enrollment state. Never persisted.

    Presentation flags are derived from ``state`` and ``challenge``.

    Attributes:
        account_id: Account this session manages.
        state: Current enrollment state.
        selected_method: Method picked but not necessarily enabled yet.
        otp_input: Last code the owner submitted.
        challenge: Challenge returned by the last enable.
    """

    account_id: str
    state: EnrollmentState = EnrollmentState.DISABLED
    selected_method: MethodType | None = None
    otp_input: str = ""
    challenge: MethodChallenge | None = None

    @property
    def showing_challenge(self) -> bool:
        return self.challenge is not None

    @property
    def show_challenge_visual(self) -> bool:
        return self.challenge is not None and self.challenge.visual

    @property
    def showing_confirmation_step(self) -> bool:
        return self.state is EnrollmentState.AWAITING_CONFIRMATION

    @property
    def showing_recovery_codes(self) -> bool:
        return self.state is EnrollmentState.CONFIRMED

    def reset(self) -> None:
        self.selected_method = None
        self.otp_input = ""
        self.challenge = None


class EnableForm(BaseModel):
    """Input for ``EnrollmentController.enable``.

    Attributes:
        method: Method to enable; falls back to the session's selection.
        email: Overrides the account's email before enabling.
        phone: Overrides the account's phone before enabling.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: MethodType | str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class RecoveryCodesAttachment:
    """Recovery codes ready to be sent as a file download."""

    content: str
    filename: str = RECOVERY_CODES_FILENAME
    media_type: str = "text/plain"

    @property
    def codes(self) -> list[str]:
        return self.content.split("\n") if self.content else []


@dataclass(frozen=True)
class EnrollmentView:
    """Everything a page needs to render the enrollment screen."""

    state: EnrollmentState
    options: list[tuple[str, str]]
    selected_method: MethodType | None
    challenge: MethodChallenge | None
    showing_challenge: bool
    show_challenge_visual: bool
    showing_confirmation_step: bool
    showing_recovery_codes: bool
    disable_label: str
    option_count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "option_count", len(self.options))


# ═══════════════════════════════════════════════════════════════
# CONTROLLER
# ═══════════════════════════════════════════════════════════════


class EnrollmentController:
    """Coordinates method selection, enable, confirm, disable and recovery codes.

    Example:
        ```python
        controller = EnrollmentController(
            accounts=account_repository,
            registry=MethodRegistry.from_config(config, delivery_hook=hook),
            password_confirmer=HashedPasswordConfirmer(),
            config=config,
            notifications=sink,
        )

        session = await controller.open_session(account_id)
        await controller.select_method(session, MethodType.AUTHENTICATOR)
        challenge = await controller.enable(session)
        await controller.confirm(session, "123456")
        ```
    """

    def __init__(
        self,
        *,
        accounts: IAccountRepository,
        registry: MethodRegistry,
        password_confirmer: IPasswordConfirmer,
        config: TwoFactorConfig | None = None,
        recovery_codes: RecoveryCodeStore | None = None,
        notifications: INotificationSink | None = None,
        audit_store: ITwoFactorAuditStore | None = None,
    ) -> None:
        self.accounts = accounts
        self.registry = registry
        self.password_confirmer = password_confirmer
        self.config = config or TwoFactorConfig()
        self.recovery_codes = recovery_codes or RecoveryCodeStore(
            self.config.recovery_codes
        )
        self.notifications = notifications
        self.audit_store = audit_store

    # ── Session ──────────────────────────────────────────────────

    async def open_session(
        self, account_id: str, *, redirect_message: str | None = None
    ) -> EnrollmentSession:
        """Start a session for an account.

        Args:
            account_id: Account to manage.
            redirect_message: Why the owner was sent here, e.g. by a policy
                that makes two-factor mandatory. Shown as a persistent
                warning.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        session = EnrollmentSession(account_id=account_id)
        account = await self._load(session)
        session.state = self._derive_state(account, None)
        if redirect_message:
            await self._notify(mandatory_notification(redirect_message))
        return session

    def view(self, session: EnrollmentSession) -> EnrollmentView:
        return EnrollmentView(
            state=session.state,
            options=self.registry.options(),
            selected_method=session.selected_method,
            challenge=session.challenge,
            showing_challenge=session.showing_challenge,
            show_challenge_visual=session.show_challenge_visual,
            showing_confirmation_step=session.showing_confirmation_step,
            showing_recovery_codes=session.showing_recovery_codes,
            disable_label=(
                "Deactivate"
                if session.state is EnrollmentState.CONFIRMED
                else "Cancel"
            ),
        )

    # ── Operations ───────────────────────────────────────────────

    async def select_method(
        self, session: EnrollmentSession, method_type: MethodType | str
    ) -> None:
        """Record the method the owner wants to enroll.

        Raises:
            ConfigurationError: If the method is not enabled.
        """
        backend = self.registry.resolve(method_type)
        session.selected_method = backend.method_type
        if session.state is EnrollmentState.DISABLED:
            session.state = EnrollmentState.ENROLLING

    async def enable(
        self, session: EnrollmentSession, form: EnableForm | None = None
    ) -> MethodChallenge:
        """Enable the selected method for the account.

        Returns:
            The challenge to show: a QR code for authenticator apps, or the
            address a code was sent to.

        Raises:
            ConfigurationError: If the method is missing or not enabled.
            ValidationError: If two-factor is already active, the method
                lacks a delivery target, or a code was sent too recently.
        """
        form = form or EnableForm()
        backend = self.registry.resolve(form.method or session.selected_method)
        method = backend.method_type

        with TwoFactorMetrics.operation("enable", method=method.value):
            account = await self._load(session)
            if account.is_confirmed:
                raise ValidationError.for_field(
                    "method", "Two-factor authentication is already active."
                )

            if form.email:
                account.email = form.email
            if form.phone:
                account.phone = form.phone
            if account.method_type is not None and account.method_type is not method:
                await self._backend(account.method_type).disable(account)

            account.method_type = method
            try:
                challenge = await backend.enable(account)
            except ResendTooSoonError as e:
                raise ValidationError.for_field("code", str(e)) from None
            self.recovery_codes.generate(account)
            if not self.config.require_confirmation:
                account.confirmed_at = datetime.now(timezone.utc)
            await self.accounts.save(account)

        session.selected_method = method
        session.challenge = challenge
        session.otp_input = ""
        session.state = self._derive_state(account, method)
        logger.info(
            "Enabled %s two-factor method for account %s", method.value, account.id
        )
        await self._audit(
            enabled_event(account.id, method.value, confirmed=account.is_confirmed)
        )
        return challenge

    async def confirm(self, session: EnrollmentSession, code: str) -> None:
        """Confirm the pending method with a code.

        Every rejection carries the same message on the ``code`` field,
        whatever the backend reported.

        Raises:
            ValidationError: If the code is empty or not accepted.
            ConfigurationError: If the account's method is no longer enabled.
        """
        session.otp_input = code or ""
        if not code or not code.strip():
            raise ValidationError.for_field("code", INVALID_CODE_MESSAGE)

        with TwoFactorMetrics.operation(
            "confirm", method=self._method_label(session)
        ):
            account = await self._load(session)
            if account.method_type is None or account.is_confirmed:
                await self._audit(
                    confirm_failed_event(account.id, self._value(account.method_type))
                )
                raise ValidationError.for_field("code", INVALID_CODE_MESSAGE)

            backend = self._backend(account.method_type)
            try:
                await backend.confirm(account, code)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.debug(
                    "Confirmation rejected for account %s: %s",
                    account.id,
                    type(e).__name__,
                )
                await self._audit(
                    confirm_failed_event(account.id, account.method_type.value)
                )
                raise ValidationError.for_field("code", INVALID_CODE_MESSAGE) from None

            account.confirmed_at = datetime.now(timezone.utc)
            self.recovery_codes.generate(account)
            await self.accounts.save(account)

        session.challenge = None
        session.otp_input = ""
        session.state = EnrollmentState.CONFIRMED
        logger.info("Two-factor confirmed for account %s", account.id)
        await self._notify(activated_notification())
        await self._audit(confirmed_event(account.id, account.method_type.value))

    async def disable(self, session: EnrollmentSession, password: str) -> None:
        """Turn two-factor off, or cancel an unconfirmed enrollment.

        The "deactivated" notification is only sent when a confirmed method
        is removed; cancelling a pending enrollment is silent.

        Raises:
            ValidationError: If the password is not confirmed.
        """
        with TwoFactorMetrics.operation(
            "disable", method=self._method_label(session)
        ):
            account = await self._load(session)
            await self._require_password(account, password, operation="disable")

            was_confirmed = account.is_confirmed
            method = account.method_type
            await self._clear(account)

        if was_confirmed:
            await self._notify(deactivated_notification())

        account = await self._load(session)
        session.reset()
        session.state = self._derive_state(account, None)
        logger.info("Two-factor disabled for account %s", account.id)
        await self._audit(
            disabled_event(account.id, self._value(method), was_confirmed=was_confirmed)
        )

    async def discard_unconfirmed_enrollment(self, session: EnrollmentSession) -> bool:
        """Drop an enrollment that was started but never confirmed.

        Only applies when the confirmation step is required. Meant to run
        when the owner comes back to the enrollment page.

        Returns:
            True if a pending enrollment was removed.
        """
        if not self.config.require_confirmation:
            return False

        account = await self._load(session)
        if account.method_type is None or account.is_confirmed:
            return False

        method = account.method_type
        await self._clear(account)
        session.reset()
        session.state = EnrollmentState.DISABLED
        logger.info(
            "Discarded unconfirmed %s enrollment for account %s",
            method.value,
            account.id,
        )
        await self._audit(enrollment_discarded_event(account.id, method.value))
        return True

    async def regenerate(self, session: EnrollmentSession, password: str) -> list[str]:
        """Replace the recovery codes with a new set.

        Returns:
            The new codes.

        Raises:
            ValidationError: If the password is not confirmed or two-factor
                is not active.
        """
        with TwoFactorMetrics.operation(
            "regenerate", method=self._method_label(session)
        ):
            account = await self._load(session)
            await self._require_password(account, password, operation="regenerate")
            if not account.is_confirmed:
                raise ValidationError.for_field(
                    "recovery_codes", "Two-factor authentication is not active."
                )

            codes = self.recovery_codes.generate(account)
            await self.accounts.save(account)

        session.state = EnrollmentState.CONFIRMED
        logger.info("Regenerated recovery codes for account %s", account.id)
        await self._audit(
            recovery_codes_regenerated_event(
                account.id, self._value(account.method_type), count=len(codes)
            )
        )
        return codes

    async def download(self, session: EnrollmentSession) -> RecoveryCodesAttachment:
        """Export the current recovery codes as a text file, one per line.

        Raises:
            ValidationError: If the account has no recovery codes.
        """
        account = await self._load(session)
        codes = self.recovery_codes.export(account)
        if not codes:
            raise ValidationError.for_field(
                "recovery_codes", "There are no recovery codes to download."
            )
        await self._audit(
            recovery_codes_downloaded_event(
                account.id, self._value(account.method_type)
            )
        )
        return RecoveryCodesAttachment(content="\n".join(codes))

    async def resend_code(self, session: EnrollmentSession) -> MethodChallenge:
        """Send the pending code again for email and phone methods.

        Raises:
            ValidationError: If nothing is pending, the method does not
                deliver codes, or the cooldown has not elapsed.
        """
        account = await self._load(session)
        if account.method_type is None or account.is_confirmed:
            raise ValidationError.for_field(
                "code", "There is no pending verification to resend."
            )

        backend = self._backend(account.method_type)
        resend = getattr(backend, "resend", None)
        if resend is None or not account.method_type.delivered_out_of_band:
            raise ValidationError.for_field(
                "code", f"{account.method_type.label} codes cannot be resent."
            )
        try:
            challenge: MethodChallenge = await resend(account)
        except ResendTooSoonError as e:
            raise ValidationError.for_field("code", str(e)) from None
        except AuthenticationError:
            raise ValidationError.for_field("code", INVALID_CODE_MESSAGE) from None
        session.challenge = challenge
        return challenge

    # ── Helpers ──────────────────────────────────────────────────

    async def _load(self, session: EnrollmentSession) -> Account:
        account = await self.accounts.get(session.account_id)
        if account is None:
            raise AccountNotFoundError(session.account_id)
        return account

    def _backend(self, method_type: MethodType) -> IVerificationMethod:
        return self.registry.resolve(method_type)

    async def _clear(self, account: Account) -> None:
        """Remove every two-factor field and persist once."""
        if account.method_type is not None:
            await self._backend(account.method_type).disable(account)
        account.clear_two_factor()
        await self.accounts.save(account)

    async def _require_password(
        self, account: Account, password: str, *, operation: str
    ) -> None:
        if not await self.password_confirmer.confirm(account, password):
            await self._audit(password_failed_event(account.id, operation=operation))
            raise ValidationError.for_field("current_password", INVALID_PASSWORD_MESSAGE)

    def _derive_state(
        self, account: Account, selected: MethodType | None
    ) -> EnrollmentState:
        if not account.is_enrolled:
            return EnrollmentState.ENROLLING if selected else EnrollmentState.DISABLED
        if account.confirmed_at is None:
            return EnrollmentState.AWAITING_CONFIRMATION
        return EnrollmentState.CONFIRMED

    @staticmethod
    def _value(method_type: MethodType | None) -> str | None:
        return method_type.value if method_type is not None else None

    @staticmethod
    def _method_label(session: EnrollmentSession) -> str | None:
        return session.selected_method.value if session.selected_method else None

    async def _notify(self, notification: Notification) -> None:
        if self.notifications is None:
            return
        try:
            await self.notifications.send(notification)
        except Exception:
            logger.warning("Dropped notification %r", notification.title, exc_info=True)

    async def _audit(self, event: TwoFactorAuditEvent) -> None:
        TwoFactorMetrics.record_event(event)
        if self.audit_store is None:
            return
        try:
            await self.audit_store.record(event)
        except Exception:
            logger.warning(
                "Failed to record audit event %s", event.event_type.value, exc_info=True
            )


__all__: list[str] = [
    "INVALID_CODE_MESSAGE",
    "INVALID_PASSWORD_MESSAGE",
    "RECOVERY_CODES_FILENAME",
    "EnrollmentSession",
    "EnableForm",
    "RecoveryCodesAttachment",
    "EnrollmentView",
    "EnrollmentController",
]
