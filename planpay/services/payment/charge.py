"""Mapping from a validated payment request to a gateway charge request."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from planpay.common.errors import TokenRequiredError
from planpay.services.payment.payer import Payer
from planpay.services.payment.schemas import CARD_PAYMENT_METHODS, PaymentMethod, PaymentRequest

# The gateway expects a JSON number for amounts.
GatewayAmount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ChargeMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_id: str = Field(serialization_alias="userId")
    plan: str


class ChargeRequest(BaseModel):
    """Body of a gateway charge, plus the optional idempotency key header."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    transaction_amount: GatewayAmount
    payment_method_id: PaymentMethod
    payer: Payer
    description: str
    metadata: ChargeMetadata
    installments: int = Field(ge=1)
    token: str | None = None
    idempotency_key: str | None = Field(default=None, exclude=True)

    def to_body(self) -> dict[str, Any]:
        """JSON-ready body; absent optional fields are left out entirely."""

        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class GatewayResponse(BaseModel):
    """Gateway reply; only `id` is consumed, the rest is kept as raw data."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    status: str | None = None
    status_detail: str | None = None

    @property
    def external_id(self) -> str:
        return str(self.id)

    def raw(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def build_charge_request(
    request: PaymentRequest,
    payer: Payer,
    idempotency_key: str | None = None,
) -> ChargeRequest:
    """Assemble the charge for `request`.

    Card brands must carry a token; any token sent with another method is
    dropped.

    Raises:
        TokenRequiredError: card-brand method without a card token.
    """

    token = None
    if request.payment_method in CARD_PAYMENT_METHODS:
        if not request.token:
            raise TokenRequiredError(f"card token required for payment method {request.payment_method.value}")
        token = request.token

    return ChargeRequest(
        transaction_amount=request.amount,
        payment_method_id=request.payment_method,
        payer=payer,
        description=f"Plano: {request.plan}",
        metadata=ChargeMetadata(user_id=request.user_id, plan=request.plan),
        installments=request.installments or 1,
        token=token,
        idempotency_key=idempotency_key,
    )
