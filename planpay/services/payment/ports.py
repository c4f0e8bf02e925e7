"""Collaborator interfaces consumed by the payment creation workflow.

Any object with the matching coroutine satisfies a port; the service never
depends on a concrete adapter.
"""

from typing import Any, Mapping, Protocol

from planpay.services.notification.models import EmailNotification
from planpay.services.payment.charge import ChargeRequest, GatewayResponse
from planpay.services.payment.models import Payment
from planpay.services.payment.schemas import EmailNotificationFields, NewPaymentRecord, PaymentRequest


class StructuralValidator(Protocol):
    async def validate(self, payload: Mapping[str, Any]) -> PaymentRequest:
        """Return the typed request or raise `SchemaError`."""
        ...


class PaymentGateway(Protocol):
    async def charge(self, request: ChargeRequest) -> GatewayResponse:
        """Submit one charge or raise `GatewayError`."""
        ...


class PaymentRepository(Protocol):
    async def create(self, fields: NewPaymentRecord) -> Payment:
        """Store a new payment record or raise `StorageError`."""
        ...


class NotificationSender(Protocol):
    async def send(self, fields: EmailNotificationFields) -> EmailNotification:
        """Queue a notification or raise `NotificationError`."""
        ...
