"""FastAPI integration for cqrs-ddd-twofactor."""

from .responses import (
    account_not_found_handler,
    configuration_error_handler,
    recovery_codes_response,
    register_exception_handlers,
    validation_error_handler,
)

__all__: list[str] = [
    # Responses
    "recovery_codes_response",
    # Exception handlers
    "validation_error_handler",
    "configuration_error_handler",
    "account_not_found_handler",
    "register_exception_handlers",
]
