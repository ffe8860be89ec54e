"""HTTP routes for payment verification and delivery."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from topup.common.errors import ValidationError
from topup.common.schemas import envelope
from topup.services.api_gateway.dependencies import get_notification_service, get_payment_service
from topup.services.notification.service import NotificationService
from topup.services.notification.templates import ProductType
from topup.services.payments.schemas import (
    DeliverRequest,
    PaymentRead,
    PaymentVerifyRequest,
    SampleFormatRequest,
)
from topup.services.payments.service import PaymentService, build_sample_payment

router = APIRouter(prefix="/api/payments", tags=["payments"])


def payment_data(payment) -> dict:
    return PaymentRead.model_validate(payment).model_dump(by_alias=True, mode="json")


@router.get("/test-telegram")
def test_telegram(notifier: NotificationService = Depends(get_notification_service)):
    """Check the bot token and send one sample notification per product type."""

    connection = notifier.test_connection()
    if not connection.success:
        return JSONResponse(
            status_code=400,
            content=envelope(False, "Telegram bot connection failed", error=connection.error),
        )

    results = {}
    for product_type in (ProductType.WEEKLY, ProductType.MONTHLY, ProductType.DIAMOND):
        sample = build_sample_payment(product_type.value)
        results[product_type.value] = notifier.notify(sample, product_type).success
    all_sent = all(results.values())
    bot = connection.data or {}
    return envelope(
        all_sent,
        "All Telegram tests successful! Check your Telegram." if all_sent else "Some tests failed",
        data={
            "botName": bot.get("first_name"),
            "botUsername": bot.get("username"),
            "testResults": results,
        },
    )


@router.post("/test-format")
def test_format(req: SampleFormatRequest, notifier: NotificationService = Depends(get_notification_service)):
    """Send a sample notification for one product type."""

    if not req.product_type:
        raise ValidationError("Product type is required (weekly, monthly, or diamond)")
    try:
        product_type = ProductType(req.product_type.lower())
    except ValueError:
        product_type = ProductType.OTHER
    sample = build_sample_payment(req.product_type)
    result = notifier.notify(sample, product_type)
    return envelope(
        result.success,
        f"{req.product_type} test message sent! Check Telegram."
        if result.success
        else f"Failed to send {req.product_type} message",
        data={
            "transactionId": sample.transaction_id,
            "amount": sample.amount,
            "playerId": sample.player_id,
            "productName": sample.product_name,
            "diamonds": sample.diamonds,
            "productType": product_type.value,
            "redemptionCode": notifier.redemption_code(sample, product_type),
        },
        error=result.error,
    )


@router.post("/verify", status_code=201)
def verify_payment(req: PaymentVerifyRequest, service: PaymentService = Depends(get_payment_service)):
    """Record a verified payment and notify the operator."""

    result = service.submit_payment(req)
    message = "Payment verified successfully!"
    if result.notification.success:
        message += " Telegram notification sent."
    data = payment_data(result.payment)
    data.update(
        {
            "productType": result.product_type.value,
            "notificationSent": result.notification.success,
            "notificationError": result.notification.error,
        }
    )
    return envelope(True, message, data)


@router.post("/{payment_id}/deliver")
def deliver_payment(
    payment_id: str,
    req: DeliverRequest | None = None,
    service: PaymentService = Depends(get_payment_service),
):
    """Mark a payment completed by internal id."""

    req = req or DeliverRequest()
    result = service.mark_delivered(payment_id, notes=req.notes, delivered_by=req.delivered_by)
    message = "Order delivered!"
    if result.notification.success:
        message += " Telegram notification sent."
    return envelope(True, message, payment_data(result.payment))


@router.get("/status/{transaction_id}")
def payment_status(transaction_id: str, service: PaymentService = Depends(get_payment_service)):
    payment = service.query_status(transaction_id)
    return envelope(True, "Payment found", payment_data(payment))


@router.get("")
def list_payments(
    limit: int = Query(default=50, ge=1, le=500),
    service: PaymentService = Depends(get_payment_service),
):
    """Most recent payments first."""

    payments = service.list_payments(limit)
    return envelope(True, "Payments retrieved", [payment_data(p) for p in payments], count=len(payments))
