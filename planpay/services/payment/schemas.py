"""Request, record and response schemas for the payment service.

`PaymentRequest` is the structural schema for incoming payment payloads;
`PaymentSchemaValidator` applies it as the workflow's structural-validation
step. JSON keys follow the public API (`paymentMethod`, `userId`), attributes
are snake_case.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from planpay.common.errors import SchemaError


class PaymentMethod(str, Enum):
    """Mercado Pago payment method identifiers accepted by the service."""

    VISA = "visa"
    MASTER = "master"
    AMEX = "amex"
    PIX = "pix"
    BOLETO = "bolbradesco"
    LOTTERY = "pec"


CARD_PAYMENT_METHODS = frozenset({PaymentMethod.VISA, PaymentMethod.MASTER, PaymentMethod.AMEX})


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class Address(BaseModel):
    """Payer postal address in gateway field names."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    zip_code: str = Field(min_length=1)
    street_name: str = Field(min_length=1)
    street_number: str = Field(min_length=1)
    neighborhood: str = Field(min_length=1)
    city: str = Field(min_length=1)
    federal_unit: str = Field(min_length=2, max_length=2)


class PayerDetails(BaseModel):
    address: Address | None = None


class PaymentRequest(BaseModel):
    """Payment creation payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    # Matches the Numeric(12, 2) column so the stored amount equals the charged one.
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    cpf: str = Field(min_length=1)
    name: str = Field(min_length=1)
    recipient: str = Field(min_length=1)
    plan: str = Field(min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    installments: int | None = Field(default=None, ge=0)
    token: str | None = None
    payer: PayerDetails | None = None
    zip_code: str | None = None
    street_name: str | None = None
    street_number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    federal_unit: str | None = None


class PaymentSchemaValidator:
    """Structural validation of raw payment payloads against `PaymentRequest`."""

    async def validate(self, payload: Mapping[str, Any]) -> PaymentRequest:
        try:
            return PaymentRequest.model_validate(payload)
        except ValidationError as exc:
            # Inputs are left out so CPFs and card tokens do not leak into responses.
            errors = exc.errors(include_url=False, include_context=False, include_input=False)
            raise SchemaError(f"payment payload failed validation ({len(errors)} errors)", errors=errors) from exc


class NewPaymentRecord(BaseModel):
    """Fields written for a new payment: the request minus the card token."""

    model_config = ConfigDict(extra="forbid")

    user_id: str
    plan: str
    amount: Decimal
    payment_method: str
    cpf: str
    name: str
    recipient: str
    installments: int | None = None
    payer_address: dict[str, Any] | None = None
    zip_code: str | None = None
    street_name: str | None = None
    street_number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    federal_unit: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    external_id: str

    @classmethod
    def from_request(cls, request: PaymentRequest, external_id: str) -> "NewPaymentRecord":
        fields = request.model_dump(exclude={"token", "payer", "payment_method"})
        address = request.payer.address if request.payer else None
        return cls(
            **fields,
            payment_method=request.payment_method.value,
            payer_address=address.model_dump() if address else None,
            external_id=external_id,
        )


class EmailStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EmailNotificationFields(BaseModel):
    """Payload handed to the notification collaborator."""

    model_config = ConfigDict(extra="forbid")

    recipient: str
    subject: str
    content: str
    status: EmailStatus = EmailStatus.PENDING
    user_id: str | None = None
    payment_id: str | None = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    user_id: str
    plan: str
    amount: Decimal
    payment_method: str
    cpf: str
    name: str
    recipient: str
    installments: int | None
    payer_address: dict[str, Any] | None
    zip_code: str | None
    street_name: str | None
    street_number: str | None
    neighborhood: str | None
    city: str | None
    federal_unit: str | None
    status: str
    external_id: str
    created_at: datetime | None = None


class EmailNotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipient: str
    subject: str
    content: str
    status: str
    user_id: str | None
    payment_id: str | None


class CreatePaymentResponse(BaseModel):
    """Body returned by `POST /payments`."""

    payment: PaymentOut
    email_notification: EmailNotificationOut
    gateway_response: dict[str, Any]
