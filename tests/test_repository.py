"""Payment and e-mail persistence against in-memory SQLite."""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from planpay.common.errors import NotificationError, StorageError
from planpay.services.notification.service import EmailNotificationService
from planpay.services.payment.repository import SqlPaymentRepository
from planpay.services.payment.schemas import EmailNotificationFields, NewPaymentRecord, PaymentRequest


def _record(payload, external_id="1001") -> NewPaymentRecord:
    return NewPaymentRecord.from_request(PaymentRequest.model_validate(payload), external_id=external_id)


@pytest.mark.asyncio
async def test_create_and_get_payment(session_factory, payment_payload, flat_address):
    payment_payload.update(flat_address)
    repository = SqlPaymentRepository(session_factory)

    payment = await repository.create(_record(payment_payload))

    assert payment.payment_id
    assert payment.status == "PENDING"
    stored = repository.get(payment.payment_id)
    assert stored.external_id == "1001"
    assert stored.amount == Decimal("49.90")
    assert stored.payment_method == "pix"
    assert stored.city == "São Paulo"
    assert stored.payer_address is None


@pytest.mark.asyncio
async def test_nested_address_is_stored_as_document(session_factory, payment_payload, flat_address):
    payment_payload["payer"] = {"address": flat_address}
    repository = SqlPaymentRepository(session_factory)

    payment = await repository.create(_record(payment_payload))

    assert repository.get(payment.payment_id).payer_address == flat_address


def test_get_unknown_payment_returns_none(session_factory):
    assert SqlPaymentRepository(session_factory).get("missing") is None


@pytest.mark.asyncio
async def test_duplicate_external_id_raises_storage_error(session_factory, payment_payload):
    repository = SqlPaymentRepository(session_factory)
    await repository.create(_record(payment_payload))

    with pytest.raises(StorageError):
        await repository.create(_record(payment_payload))


@pytest.mark.asyncio
async def test_notification_is_queued_pending(session_factory):
    service = EmailNotificationService(session_factory)

    notification = await service.send(
        EmailNotificationFields(
            recipient="maria@example.com",
            subject="Confirmação de Pagamento",
            content="Obrigado por seu pagamento. Você adquiriu o plano: premium.",
            user_id="user-42",
            payment_id="payment-1",
        )
    )

    assert notification.id
    assert notification.status == "PENDING"
    assert notification.payment_id == "payment-1"


@pytest.mark.asyncio
async def test_notification_store_failure_raises_notification_error():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    service = EmailNotificationService(sessionmaker(bind=engine))

    with pytest.raises(NotificationError):
        await service.send(EmailNotificationFields(recipient="maria@example.com", subject="s", content="c"))

    engine.dispose()
