"""HTTP surface for payment creation and payment lookups."""

from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse

from planpay.common.config import settings
from planpay.common.db import SessionLocal, create_tables
from planpay.common.errors import (
    GatewayError,
    NotificationError,
    PaymentValidationError,
    SchemaError,
    StorageError,
)
from planpay.common.logging import configure_logging, trace_id_ctx
from planpay.common.metrics import metrics_response
from planpay.common.startup import log_startup_config
from planpay.common.state_machine import WorkflowRun
from planpay.common.tracing import instrument_app, setup_tracing
from planpay.services.notification.service import EmailNotificationService
from planpay.services.payment.repository import SqlPaymentRepository
from planpay.services.payment.schemas import (
    CreatePaymentResponse,
    EmailNotificationOut,
    PaymentOut,
    PaymentSchemaValidator,
)
from planpay.services.payment.service import CreatePaymentService
from planpay.services.provider_adapter.service import MercadoPagoAdapter

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "POSTGRES_DSN",
        "MERCADOPAGO_BASE_URL",
        "MERCADOPAGO_ACCESS_TOKEN",
        "GATEWAY_TIMEOUT_SECONDS",
        "GATEWAY_IDEMPOTENCY_KEYS",
    ],
)
payment_repository = SqlPaymentRepository(SessionLocal)


def get_payment_service() -> CreatePaymentService:
    """Wire the workflow to the configured database and gateway."""

    return CreatePaymentService(
        validator=PaymentSchemaValidator(),
        gateway=MercadoPagoAdapter(
            access_token=settings.mercadopago_access_token,
            base_url=settings.mercadopago_base_url,
            timeout=settings.gateway_timeout_seconds,
            service_name=settings.service_name,
        ),
        repository=payment_repository,
        notifier=EmailNotificationService(SessionLocal),
        send_idempotency_keys=settings.gateway_idempotency_keys,
        service_name=settings.service_name,
    )


def get_payment_repository() -> SqlPaymentRepository:
    return payment_repository


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Create tables before serving."""

    create_tables()
    yield


app = FastAPI(title="planpay Payments", lifespan=lifespan)
instrument_app(app)


def enforce_api_key(x_api_key: str | None) -> None:
    """Reject requests that do not provide the configured API key."""

    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="invalid API key")


def _committed_failure(exc: Exception, run: WorkflowRun) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "error": type(exc).__name__,
            "charge_committed": run.charge_committed,
            "external_id": run.external_id,
        },
    )


@app.post("/payments", status_code=201, response_model=CreatePaymentResponse)
async def create_payment(
    payload: dict[str, Any] = Body(...),
    x_api_key: str | None = Header(default=None),
    x_trace_id: str | None = Header(default=None),
    service: CreatePaymentService = Depends(get_payment_service),
):
    """Charge the payer and return the stored payment, queued e-mail and gateway reply."""

    enforce_api_key(x_api_key)
    trace_id_ctx.set(x_trace_id or str(uuid4()))
    run = WorkflowRun()
    try:
        result = await service.execute(payload, run=run)
    except SchemaError as exc:
        raise HTTPException(status_code=422, detail=exc.errors) from exc
    except PaymentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except (StorageError, NotificationError) as exc:
        return _committed_failure(exc, run)

    return CreatePaymentResponse(
        payment=PaymentOut.model_validate(result.payment),
        email_notification=EmailNotificationOut.model_validate(result.email_notification),
        gateway_response=result.gateway_response.raw(),
    )


@app.get("/payments/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: str, repository: SqlPaymentRepository = Depends(get_payment_repository)):
    """Fetch one stored payment record."""

    payment = repository.get(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="payment not found")
    return PaymentOut.model_validate(payment)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
