"""Payment database models.

One row per successful charge. Rows are written once by the creation workflow;
status transitions after `PENDING` happen elsewhere.
"""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from planpay.common.db import Base, JsonDocument


class Payment(Base):
    """Stored payment record, keyed locally and by gateway charge id."""

    __tablename__ = "payments"

    payment_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String, index=True)
    plan: Mapped[str] = mapped_column(String)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[str] = mapped_column(String)
    cpf: Mapped[str] = mapped_column(String)
    name: Mapped[str] = mapped_column(String)
    recipient: Mapped[str] = mapped_column(String)
    installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payer_address: Mapped[dict | None] = mapped_column(JsonDocument, nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String, nullable=True)
    street_name: Mapped[str | None] = mapped_column(String, nullable=True)
    street_number: Mapped[str | None] = mapped_column(String, nullable=True)
    neighborhood: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    federal_unit: Mapped[str | None] = mapped_column(String(2), nullable=True)
    status: Mapped[str] = mapped_column(String, index=True)
    external_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
