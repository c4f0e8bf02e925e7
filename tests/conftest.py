"""Shared fixtures: hermetic settings, in-memory database and collaborator fakes."""

import os

# Settings are read at import time, so these must be set before planpay loads.
os.environ["POSTGRES_DSN"] = "sqlite+pysqlite://"
os.environ["API_KEY"] = "test-api-key"
os.environ["MERCADOPAGO_ACCESS_TOKEN"] = "TEST-access-token"
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""

from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from planpay.common.db import Base, create_tables  # noqa: E402
from planpay.services.notification.models import EmailNotification  # noqa: E402
from planpay.services.payment.charge import GatewayResponse  # noqa: E402
from planpay.services.payment.models import Payment  # noqa: E402
from planpay.services.payment.schemas import PaymentSchemaValidator  # noqa: E402

VALID_CPF = "529.982.247-25"
VALID_CPF_DIGITS = "52998224725"


class FakeGateway:
    """Records every charge; returns increasing ids or raises `error`."""

    def __init__(self, error: Exception | None = None, first_id: int = 1001) -> None:
        self.requests = []
        self.error = error
        self._next_id = first_id

    async def charge(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        charge_id = self._next_id
        self._next_id += 1
        return GatewayResponse(id=charge_id, status="pending", status_detail="pending_waiting_transfer")


class InMemoryPaymentRepository:
    def __init__(self, error: Exception | None = None) -> None:
        self.created = []
        self.calls = 0
        self.error = error

    async def create(self, fields):
        self.calls += 1
        if self.error is not None:
            raise self.error
        values = fields.model_dump()
        values["status"] = fields.status.value
        payment = Payment(payment_id=str(uuid4()), **values)
        self.created.append(payment)
        return payment


class RecordingNotifier:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent = []
        self.calls = 0
        self.error = error

    async def send(self, fields):
        self.calls += 1
        if self.error is not None:
            raise self.error
        notification = EmailNotification(
            id=str(uuid4()),
            recipient=fields.recipient,
            subject=fields.subject,
            content=fields.content,
            status=fields.status.value,
            user_id=fields.user_id,
            payment_id=fields.payment_id,
        )
        self.sent.append(notification)
        return notification


class RecordingValidator(PaymentSchemaValidator):
    def __init__(self) -> None:
        self.payloads = []

    async def validate(self, payload):
        self.payloads.append(payload)
        return await super().validate(payload)


@pytest.fixture
def session_factory():
    """Session factory over a private in-memory SQLite database."""

    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def payment_payload() -> dict:
    """A valid PIX request: no card token, no address."""

    return {
        "amount": "49.90",
        "paymentMethod": "pix",
        "cpf": VALID_CPF,
        "name": "Maria Silva",
        "recipient": "maria@example.com",
        "plan": "premium",
        "userId": "user-42",
    }


@pytest.fixture
def flat_address() -> dict:
    return {
        "zip_code": "01310-100",
        "street_name": "Avenida Paulista",
        "street_number": "1578",
        "neighborhood": "Bela Vista",
        "city": "São Paulo",
        "federal_unit": "SP",
    }


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def repository() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def validator() -> RecordingValidator:
    return RecordingValidator()
