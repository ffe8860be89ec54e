"""Payment lifecycle.

Validates payment claims, enforces transaction id uniqueness, applies status
transitions and fires the operator notification for each one. State is always
committed before the notification is attempted; a failed notification only
shows up as a flag on the returned result.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from topup.common.db import session_scope
from topup.common.errors import DuplicateTransaction, NotFound
from topup.common.logging import logger, transaction_id_ctx
from topup.common.metrics import payment_submissions_total, payment_transitions_total
from topup.common.state_machine import COMPLETED, FAILED, VERIFIED, is_forward_transition
from topup.services.notification.service import NotificationResult, NotificationService
from topup.services.notification.templates import ProductType, classify_product
from topup.services.payments.models import Order, Payment
from topup.services.payments.schemas import PaymentVerifyRequest

DEFAULT_PRODUCT_NAME = "Free Fire Diamond Pack"
DEFAULT_FAILED_REASON = "Manual cancellation"


def normalize_transaction_id(transaction_id: str) -> str:
    return transaction_id.strip().upper()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubmitResult:
    payment: Payment
    product_type: ProductType
    notification: NotificationResult


@dataclass
class TransitionResult:
    payment: Payment
    notification: NotificationResult
    message_edit: NotificationResult | None = None


class PaymentService:
    """Owns payment status progression and its operator notifications."""

    def __init__(
        self,
        session_factory,
        notifier: NotificationService,
        payment_number: str = "",
        service_name: str = "topup-api",
    ) -> None:
        self.session_factory = session_factory
        self.notifier = notifier
        self.payment_number = payment_number
        self.service_name = service_name

    def submit_payment(self, req: PaymentVerifyRequest) -> SubmitResult:
        """Store a verified payment once per transaction id, then notify the operator."""

        transaction_id = normalize_transaction_id(req.transaction_id)
        transaction_id_ctx.set(transaction_id)

        with session_scope(self.session_factory) as db:
            existing = db.execute(
                select(Payment.payment_id).where(Payment.transaction_id == transaction_id)
            ).scalar_one_or_none()
            if existing is not None:
                self._reject_duplicate(transaction_id)

            now = utcnow()
            payment = Payment(
                transaction_id=transaction_id,
                amount=float(req.amount),
                player_id=req.player_id,
                product_id=req.product_id,
                product_name=req.product_name or DEFAULT_PRODUCT_NAME,
                diamonds=req.diamonds or 0,
                price=req.price if req.price is not None else float(req.amount),
                status=VERIFIED,
                payment_number=self.payment_number,
                notification_sent=False,
                created_at=now,
                verified_at=now,
            )
            db.add(payment)
            try:
                db.commit()
            except IntegrityError as exc:
                # A concurrent submission won the race past the pre-check.
                db.rollback()
                self._reject_duplicate(transaction_id, exc)

        payment_submissions_total.labels(service=self.service_name, outcome="verified").inc()
        product_type = classify_product(payment.product_name, payment.diamonds)
        logger.info(
            "payment_verified transaction_id=%s amount=%s player_id=%s product=%s product_type=%s",
            payment.transaction_id,
            payment.amount,
            payment.player_id,
            payment.product_name,
            product_type.value,
        )

        notification = self.notifier.notify(payment, product_type)
        if notification.success:
            self._record_notification(payment, notification.message_ref)
        return SubmitResult(payment=payment, product_type=product_type, notification=notification)

    def _reject_duplicate(self, transaction_id: str, cause: Exception | None = None) -> None:
        payment_submissions_total.labels(service=self.service_name, outcome="duplicate").inc()
        logger.info("duplicate_transaction transaction_id=%s", transaction_id)
        raise DuplicateTransaction(f"Transaction ID already exists: {transaction_id}") from cause

    def _record_notification(self, payment: Payment, message_ref: str | None) -> None:
        """Flag the payment as notified; the payment itself is already committed."""

        try:
            with self.session_factory() as db:
                db.execute(
                    update(Payment)
                    .where(Payment.payment_id == payment.payment_id)
                    .values(notification_sent=True, notification_message_ref=message_ref)
                )
                db.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "notification_flag_write_failed transaction_id=%s error=%s", payment.transaction_id, exc
            )
            return
        payment.notification_sent = True
        payment.notification_message_ref = message_ref

    def _transition(self, payment: Payment, new_status: str, reason: str) -> None:
        """Apply a status change in memory. Non-forward moves are allowed but logged."""

        from_status = payment.status
        if not is_forward_transition(from_status, new_status):
            logger.warning(
                "non_forward_transition transaction_id=%s from=%s to=%s reason=%s",
                payment.transaction_id,
                from_status,
                new_status,
                reason,
            )
        payment.status = new_status
        payment_transitions_total.labels(
            service=self.service_name, from_status=from_status, to_status=new_status
        ).inc()
        logger.info(
            "payment_transition transaction_id=%s from=%s to=%s reason=%s",
            payment.transaction_id,
            from_status,
            new_status,
            reason,
        )

    def _record_delivery(
        self, db, payment: Payment, now: datetime, notes: str | None, delivered_by: str | None
    ) -> Order:
        order = db.execute(select(Order).where(Order.payment_id == payment.payment_id)).scalar_one_or_none()
        if order is None:
            order = Order(
                payment_id=payment.payment_id,
                player_id=payment.player_id,
                product_id=payment.product_id,
                product_name=payment.product_name,
                diamonds=payment.diamonds,
                amount=payment.amount,
                delivery_method="manual",
                estimated_delivery=60,
                created_at=now,
            )
            db.add(order)
        order.status = "delivered"
        order.delivered_at = now
        order.updated_at = now
        if notes is not None:
            order.delivery_notes = notes
        if delivered_by is not None:
            order.delivered_by = delivered_by
        return order

    def _get_by_transaction_id(self, db, transaction_id: str) -> Payment:
        normalized = normalize_transaction_id(transaction_id)
        payment = db.execute(
            select(Payment).where(Payment.transaction_id == normalized)
        ).scalar_one_or_none()
        if payment is None:
            raise NotFound(f"Transaction not found: {normalized}")
        return payment

    def mark_delivered(
        self, payment_id: str, notes: str | None = None, delivered_by: str | None = None
    ) -> TransitionResult:
        """Complete a payment by internal id and send the delivery confirmation."""

        with session_scope(self.session_factory) as db:
            payment = db.get(Payment, payment_id)
            if payment is None:
                raise NotFound("Payment not found")
            transaction_id_ctx.set(payment.transaction_id)
            now = utcnow()
            self._transition(payment, COMPLETED, reason="delivered")
            payment.completed_at = now
            self._record_delivery(db, payment, now, notes, delivered_by)
            db.commit()

        notification = self.notifier.send_delivery_confirmation(
            payment.transaction_id, payment.player_id, payment.product_name
        )
        return TransitionResult(payment=payment, notification=notification)

    def mark_completed_by_transaction_id(
        self, transaction_id: str, delivered_by: str | None = None
    ) -> TransitionResult:
        """Complete a payment from the operator channel, keyed by transaction id."""

        with session_scope(self.session_factory) as db:
            payment = self._get_by_transaction_id(db, transaction_id)
            transaction_id_ctx.set(payment.transaction_id)
            now = utcnow()
            self._transition(payment, COMPLETED, reason="operator_marked_delivered")
            payment.completed_at = now
            self._record_delivery(db, payment, now, None, delivered_by)
            db.commit()

        notification = self.notifier.send_marked_delivered(payment)
        return TransitionResult(payment=payment, notification=notification, message_edit=self._edit_original(payment))

    def mark_failed(self, transaction_id: str, reason: str | None = None) -> TransitionResult:
        """Fail a payment from the operator channel, keyed by transaction id."""

        with session_scope(self.session_factory) as db:
            payment = self._get_by_transaction_id(db, transaction_id)
            transaction_id_ctx.set(payment.transaction_id)
            self._transition(payment, FAILED, reason="operator_marked_failed")
            payment.failed_at = utcnow()
            payment.failed_reason = reason or DEFAULT_FAILED_REASON
            db.commit()

        notification = self.notifier.send_marked_failed(payment)
        return TransitionResult(payment=payment, notification=notification, message_edit=self._edit_original(payment))

    def _edit_original(self, payment: Payment) -> NotificationResult | None:
        if not payment.notification_message_ref:
            return None
        return self.notifier.edit_payment_message(payment)

    def query_status(self, transaction_id: str) -> Payment:
        with session_scope(self.session_factory) as db:
            return self._get_by_transaction_id(db, transaction_id)

    def list_payments(self, limit: int = 50) -> list[Payment]:
        with session_scope(self.session_factory) as db:
            return list(
                db.execute(select(Payment).order_by(Payment.created_at.desc()).limit(limit)).scalars().all()
            )


SAMPLE_PRODUCTS = {
    ProductType.WEEKLY: (149, "1x weekly", 0),
    ProductType.MONTHLY: (349, "Monthly Membership", 0),
    ProductType.DIAMOND: (185, "240 Diamond", 240),
}


def build_sample_payment(product_type: str) -> Payment:
    """Unsaved payment used to preview a notification format in the operator chat."""

    try:
        amount, name, diamonds = SAMPLE_PRODUCTS[ProductType(product_type.lower())]
    except (KeyError, ValueError):
        amount, name, diamonds = 100, "Test Product", 50
    now = utcnow()
    return Payment(
        transaction_id=f"{product_type.upper()}_{now.strftime('%H%M%S')}",
        amount=amount,
        player_id=f"TEST{random.randint(0, 999_999)}",
        product_id="sample",
        product_name=name,
        diamonds=diamonds,
        price=amount,
        status=VERIFIED,
        notification_sent=False,
        created_at=now,
        verified_at=now,
    )
