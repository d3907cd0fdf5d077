"""Authenticator app method (TOTP).

Works with any RFC 6238 authenticator app:
- Google Authenticator
- Microsoft Authenticator
- Authy
- 1Password
- FreeOTP

Uses pyotp library internally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import TotpConfig
from ..domain import MethodChallenge, MethodType
from .base import SecretBackedMethod

if TYPE_CHECKING:
    from ..domain import Account


class AuthenticatorMethod(SecretBackedMethod):
    """Verification through an authenticator app.

    Enabling generates a secret and returns an otpauth:// URI to render as
    a QR code, plus the same secret grouped for manual entry.

    Example:
        ```python
        method = AuthenticatorMethod(TotpConfig(issuer="Acme"))

        challenge = await method.enable(account)
        render_qr(challenge.provisioning_uri)

        await method.confirm(account, "123456")
        ```
    """

    method_type = MethodType.AUTHENTICATOR

    def __init__(self, config: TotpConfig | None = None) -> None:
        self.config = config or TotpConfig()
        super().__init__(
            digits=self.config.digits,
            interval=self.config.interval,
            valid_window=self.config.valid_window,
        )

    async def enable(self, account: Account) -> MethodChallenge:
        secret = self._new_secret(account)
        uri = self._totp(secret).provisioning_uri(
            name=account.email or account.id,
            issuer_name=self.config.issuer,
        )
        return MethodChallenge(
            method_type=self.method_type,
            visual=True,
            provisioning_uri=uri,
            manual_key=self._format_secret(secret),
        )

    def _format_secret(self, secret: str) -> str:
        """Group the secret in blocks of 4 for manual entry."""
        secret = secret.rstrip("=")
        return " ".join(secret[i : i + 4] for i in range(0, len(secret), 4))


__all__: list[str] = ["AuthenticatorMethod"]
