"""Gateway payer descriptor assembled from a payment payload."""

from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict

from planpay.common.errors import MissingNameError

FLAT_ADDRESS_FIELDS = ("zip_code", "street_name", "street_number", "neighborhood", "city", "federal_unit")
EMPTY_LAST_NAME = "-"


class Identification(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["CPF"] = "CPF"
    number: str


class Payer(BaseModel):
    """Payer block of a gateway charge request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    email: str | None
    first_name: str
    last_name: str
    identification: Identification
    address: dict[str, Any] | None = None


def split_name(full_name: str) -> tuple[str, str]:
    """Split into first token and the rest, using `-` when there is no rest."""

    first, *rest = full_name.split()
    return first, " ".join(rest) or EMPTY_LAST_NAME


def resolve_address(payload: Mapping[str, Any]) -> dict[str, Any] | None:
    """Nested `payer.address` wins; flat fields count only as a complete set."""

    payer_input = payload.get("payer")
    if isinstance(payer_input, Mapping) and isinstance(payer_input.get("address"), Mapping):
        return dict(payer_input["address"])
    if all(payload.get(name) for name in FLAT_ADDRESS_FIELDS):
        return {name: payload[name] for name in FLAT_ADDRESS_FIELDS}
    return None


def assemble_payer(payload: Mapping[str, Any], identity_number: str) -> Payer:
    """Build the payer descriptor for an already CPF-checked payload.

    Raises:
        MissingNameError: the payload has no usable full name.
    """

    full_name = payload.get("name")
    if not isinstance(full_name, str) or not full_name.strip():
        raise MissingNameError("payer name not provided")
    first_name, last_name = split_name(full_name)
    recipient = payload.get("recipient")
    return Payer(
        email=None if recipient is None else str(recipient),
        first_name=first_name,
        last_name=last_name,
        identification=Identification(number=identity_number),
        address=resolve_address(payload),
    )
