"""Payment lifecycle database models.

`payments` is the source of truth for payment status; `orders` records the
delivery side of a completed payment.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from topup.common.db import Base


class Payment(Base):
    """A buyer's claim that a product was paid for."""

    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("transaction_id", name="uq_payments_transaction_id"),)

    payment_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    transaction_id: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    player_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    product_id: Mapped[str] = mapped_column(String, nullable=False)
    product_name: Mapped[str] = mapped_column(String, nullable=False)
    diamonds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(String, index=True, nullable=False)
    payment_number: Mapped[str] = mapped_column(String, nullable=False, default="")
    notification_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notification_message_ref: Mapped[str | None] = mapped_column(String, nullable=True)
    failed_reason: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    failed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Order(Base):
    """Delivery record for a payment the operator fulfilled."""

    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    payment_id: Mapped[str] = mapped_column(ForeignKey("payments.payment_id"), unique=True, index=True)
    player_id: Mapped[str] = mapped_column(String, index=True)
    product_id: Mapped[str] = mapped_column(String)
    product_name: Mapped[str] = mapped_column(String)
    diamonds: Mapped[int] = mapped_column(Integer, default=0)
    amount: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String, index=True, default="pending")
    delivery_method: Mapped[str] = mapped_column(String, default="manual")
    delivered_by: Mapped[str | None] = mapped_column(String, nullable=True)
    delivery_notes: Mapped[str | None] = mapped_column(String, nullable=True)
    estimated_delivery: Mapped[int] = mapped_column(Integer, default=60)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
