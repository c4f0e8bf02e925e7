"""Payment creation workflow.

Sequences CPF and name validation, structural validation, the gateway charge,
record persistence and the confirmation e-mail. Each step starts only after
the previous one succeeded; the first error ends the run and reaches the
caller unchanged. Nothing is retried or compensated: once the gateway accepts
the charge, a later storage or notification failure leaves that charge in
place for manual reconciliation.
"""

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Mapping
from uuid import uuid4

from opentelemetry import trace

from planpay.common.cpf import is_valid_cpf, remove_cpf_punctuation
from planpay.common.errors import InvalidIdentityNumberError, MissingIdentityNumberError, StorageError
from planpay.common.logging import logger, user_id_ctx, workflow_state_ctx
from planpay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_orphaned_charges_total,
    payment_requests_total,
    payment_success_total,
)
from planpay.common.state_machine import WorkflowRun, WorkflowState
from planpay.services.notification.models import EmailNotification
from planpay.services.payment.charge import GatewayResponse, build_charge_request
from planpay.services.payment.models import Payment
from planpay.services.payment.payer import assemble_payer
from planpay.services.payment.ports import (
    NotificationSender,
    PaymentGateway,
    PaymentRepository,
    StructuralValidator,
)
from planpay.services.payment.schemas import EmailNotificationFields, NewPaymentRecord

CONFIRMATION_SUBJECT = "Confirmação de Pagamento"
CONFIRMATION_CONTENT = "Obrigado por seu pagamento. Você adquiriu o plano: {plan}."

tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class CreatePaymentResult:
    payment: Payment
    email_notification: EmailNotification
    gateway_response: GatewayResponse


class CreatePaymentService:
    """Runs one payment creation per `execute` call over injected collaborators."""

    def __init__(
        self,
        validator: StructuralValidator,
        gateway: PaymentGateway,
        repository: PaymentRepository,
        notifier: NotificationSender,
        send_idempotency_keys: bool = False,
        service_name: str = "payments",
    ) -> None:
        self.validator = validator
        self.gateway = gateway
        self.repository = repository
        self.notifier = notifier
        self.send_idempotency_keys = send_idempotency_keys
        self.service_name = service_name

    async def execute(self, payload: Mapping[str, Any], run: WorkflowRun | None = None) -> CreatePaymentResult:
        """Create a payment from a raw request payload.

        Pass a `WorkflowRun` to inspect how far a failed run got; its
        `charge_committed` flag tells whether the gateway was charged.

        Raises:
            ValueError: `run` has already been used by another execution.
            MissingIdentityNumberError, InvalidIdentityNumberError,
            MissingNameError, SchemaError, TokenRequiredError: rejected before
                any external side effect.
            GatewayError: charge submission failed.
            StorageError: charged, but no payment record was written.
            NotificationError: charged and recorded, e-mail not queued.
        """

        run = run if run is not None else WorkflowRun()
        if run.history != [WorkflowState.VALIDATING]:
            raise ValueError(f"WorkflowRun already used (state={run.state.value}); pass a fresh run")
        user_token = user_id_ctx.set(str(payload.get("userId") or ""))
        state_token = workflow_state_ctx.set(run.state.value)
        payment_requests_total.labels(service=self.service_name).inc()
        started = perf_counter()
        try:
            result = await self._run(payload, run)
        except Exception as exc:
            self._record_failure(run, exc)
            raise
        finally:
            payment_latency_seconds.labels(service=self.service_name).observe(perf_counter() - started)
            workflow_state_ctx.reset(state_token)
            user_id_ctx.reset(user_token)
        payment_success_total.labels(service=self.service_name).inc()
        logger.info(
            "payment_created payment_id=%s external_id=%s",
            result.payment.payment_id,
            run.external_id,
        )
        return result

    async def _run(self, payload: Mapping[str, Any], run: WorkflowRun) -> CreatePaymentResult:
        with tracer.start_as_current_span("payment.validating"):
            raw_cpf = payload.get("cpf")
            if not raw_cpf:
                raise MissingIdentityNumberError("CPF not provided")
            cpf = remove_cpf_punctuation(str(raw_cpf))
            if not is_valid_cpf(cpf):
                raise InvalidIdentityNumberError("CPF is invalid")
            payer = assemble_payer(payload, cpf)

        self._advance(run, WorkflowState.STRUCTURAL_VALIDATING)
        with tracer.start_as_current_span("payment.structural_validating"):
            request = await self.validator.validate(payload)

        self._advance(run, WorkflowState.CHARGING)
        with tracer.start_as_current_span("payment.charging"):
            idempotency_key = str(uuid4()) if self.send_idempotency_keys else None
            charge_request = build_charge_request(request, payer, idempotency_key=idempotency_key)
            gateway_response = await self.gateway.charge(charge_request)
            run.record_charge(gateway_response.external_id)

        self._advance(run, WorkflowState.PERSISTING)
        with tracer.start_as_current_span("payment.persisting"):
            payment = await self.repository.create(
                NewPaymentRecord.from_request(request, external_id=gateway_response.external_id)
            )

        self._advance(run, WorkflowState.NOTIFYING)
        with tracer.start_as_current_span("payment.notifying"):
            notification = await self.notifier.send(
                EmailNotificationFields(
                    recipient=request.recipient,
                    subject=CONFIRMATION_SUBJECT,
                    content=CONFIRMATION_CONTENT.format(plan=request.plan),
                    user_id=request.user_id,
                    payment_id=payment.payment_id,
                )
            )

        self._advance(run, WorkflowState.COMPLETED)
        return CreatePaymentResult(
            payment=payment,
            email_notification=notification,
            gateway_response=gateway_response,
        )

    def _advance(self, run: WorkflowRun, new: WorkflowState) -> None:
        from_state = run.state
        run.advance(new)
        workflow_state_ctx.set(new.value)
        logger.info("payment_state_transition from=%s to=%s", from_state.value, new.value)

    def _record_failure(self, run: WorkflowRun, exc: Exception) -> None:
        run.fail(exc)
        stage = run.failed_in.value
        payment_failure_total.labels(
            service=self.service_name,
            stage=stage,
            error=type(exc).__name__,
        ).inc()
        if not run.charge_committed:
            logger.warning("payment_rejected stage=%s error=%s detail=%s", stage, type(exc).__name__, exc)
            return
        # Past the point of no return: the charge exists upstream.
        if isinstance(exc, StorageError):
            payment_orphaned_charges_total.labels(service=self.service_name).inc()
        logger.error(
            "payment_charged_but_incomplete stage=%s external_id=%s error=%s detail=%s",
            stage,
            run.external_id,
            type(exc).__name__,
            exc,
        )
