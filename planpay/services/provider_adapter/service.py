"""Mercado Pago payments API adapter.

Submits one charge per call. Authentication is a bearer access token; there is
no retry at this layer, so a timeout surfaces as a `GatewayError` whose charge
may or may not have been created upstream.
"""

import httpx
from pydantic import ValidationError

from planpay.common.errors import GatewayError
from planpay.common.logging import logger
from planpay.common.metrics import gateway_charges_total
from planpay.services.payment.charge import ChargeRequest, GatewayResponse


class MercadoPagoAdapter:
    """`PaymentGateway` implementation for `POST /v1/payments`."""

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        service_name: str = "payments",
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.service_name = service_name

    def _headers(self, request: ChargeRequest) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if request.idempotency_key:
            headers["X-Idempotency-Key"] = request.idempotency_key
        return headers

    async def charge(self, request: ChargeRequest) -> GatewayResponse:
        """Create the charge and return the gateway's payment resource."""

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    f"{self.base_url}/v1/payments",
                    headers=self._headers(request),
                    json=request.to_body(),
                )
        except httpx.HTTPError as exc:
            gateway_charges_total.labels(service=self.service_name, outcome="transport_error").inc()
            logger.warning("gateway_transport_error error=%s", exc)
            raise GatewayError(f"payment gateway unreachable: {exc}") from exc

        if resp.status_code >= 400:
            gateway_charges_total.labels(service=self.service_name, outcome="rejected").inc()
            detail = _response_detail(resp)
            logger.warning("gateway_rejected status_code=%s detail=%s", resp.status_code, detail)
            raise GatewayError(
                f"payment gateway rejected charge (status={resp.status_code})",
                status_code=resp.status_code,
                detail=detail,
            )

        try:
            response = GatewayResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            gateway_charges_total.labels(service=self.service_name, outcome="malformed").inc()
            logger.warning("gateway_malformed_response status_code=%s body=%s", resp.status_code, resp.text)
            raise GatewayError(
                "payment gateway response malformed",
                status_code=resp.status_code,
                detail=resp.text,
            ) from exc

        gateway_charges_total.labels(service=self.service_name, outcome="accepted").inc()
        logger.info("gateway_charge_accepted external_id=%s status=%s", response.external_id, response.status)
        return response


def _response_detail(resp: httpx.Response):
    try:
        return resp.json()
    except ValueError:
        return resp.text
