"""FastAPI responses and exception handlers for two-factor enrollment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ...exceptions import AccountNotFoundError, ConfigurationError, ValidationError

if TYPE_CHECKING:
    from ...controller import RecoveryCodesAttachment

logger = logging.getLogger(__name__)


def recovery_codes_response(attachment: RecoveryCodesAttachment) -> PlainTextResponse:
    """Send recovery codes as a file download.

    Example:
        ```python
        @router.get("/two-factor/recovery-codes")
        async def download(session = Depends(get_session)):
            return recovery_codes_response(await controller.download(session))
        ```
    """
    return PlainTextResponse(
        content=attachment.content,
        media_type=attachment.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{attachment.filename}"'
        },
    )


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Map ValidationError to 422 with field-scoped messages."""
    return JSONResponse(status_code=422, content={"errors": exc.errors})


async def configuration_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Map ConfigurationError to 500 without leaking the details."""
    logger.error("Two-factor misconfiguration on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Two-factor authentication is misconfigured"},
    )


async def account_not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Account not found"})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the two-factor exception handlers on an application."""
    app.add_exception_handler(ValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(AccountNotFoundError, account_not_found_handler)


__all__: list[str] = [
    "recovery_codes_response",
    "validation_error_handler",
    "configuration_error_handler",
    "account_not_found_handler",
    "register_exception_handlers",
]
