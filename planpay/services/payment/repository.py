"""SQLAlchemy-backed payment record store."""

from sqlalchemy.exc import SQLAlchemyError

from planpay.common.errors import StorageError
from planpay.common.logging import logger
from planpay.services.payment.models import Payment
from planpay.services.payment.schemas import NewPaymentRecord


class SqlPaymentRepository:
    """Writes one `payments` row per successful charge."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def create(self, fields: NewPaymentRecord) -> Payment:
        """Insert the record and return it detached from the session."""

        try:
            with self.session_factory() as db:
                values = fields.model_dump()
                values["status"] = fields.status.value
                payment = Payment(**values)
                db.add(payment)
                db.commit()
                db.refresh(payment)
                return payment
        except SQLAlchemyError as exc:
            logger.error("payment_store_failed external_id=%s error=%s", fields.external_id, exc)
            raise StorageError(f"could not store payment for charge {fields.external_id}") from exc

    def get(self, payment_id: str) -> Payment | None:
        with self.session_factory() as db:
            return db.get(Payment, payment_id)
