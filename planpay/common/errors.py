"""Named failure conditions of the payment creation workflow.

Hierarchy:
    PaymentError
    ├── PaymentValidationError     (raised before any external call)
    │   ├── MissingIdentityNumberError
    │   ├── InvalidIdentityNumberError
    │   ├── MissingNameError
    │   ├── TokenRequiredError
    │   └── SchemaError
    ├── GatewayError               (charge submission failed)
    ├── StorageError               (charge succeeded, record not written)
    └── NotificationError          (charge and record succeeded, e-mail not queued)

Validation errors are safe to retry with corrected input. The last three leave
side effects behind and need manual reconciliation by the caller.
"""

from typing import Any


class PaymentError(Exception):
    """Base class for every error surfaced by the payment workflow."""


class PaymentValidationError(PaymentError):
    """Request rejected before the gateway was contacted."""


class MissingIdentityNumberError(PaymentValidationError):
    """CPF not provided."""


class InvalidIdentityNumberError(PaymentValidationError):
    """CPF failed the check-digit algorithm."""


class MissingNameError(PaymentValidationError):
    """Payer full name not provided."""


class TokenRequiredError(PaymentValidationError):
    """Card-brand payment method selected without a card token."""


class SchemaError(PaymentValidationError):
    """Request failed structural validation."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class GatewayError(PaymentError):
    """Charge submission to the payment gateway failed.

    Covers transport failures and gateway rejections alike; `status_code` is
    None when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class StorageError(PaymentError):
    """Payment record could not be persisted."""


class NotificationError(PaymentError):
    """Confirmation notification could not be queued."""
