"""Bot webhook, webhook management and operator mark endpoints."""

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from topup.common.config import settings
from topup.common.logging import logger
from topup.common.schemas import envelope
from topup.services.api_gateway.dependencies import (
    get_command_handler,
    get_notification_service,
    get_payment_service,
)
from topup.services.notification.commands import TelegramCommandHandler
from topup.services.notification.service import NotificationService
from topup.services.notification.templates import ProductType
from topup.services.payments.schemas import MarkFailedRequest
from topup.services.payments.service import PaymentService, build_sample_payment

router = APIRouter(prefix="/api/telegram", tags=["telegram"])


@router.post("/webhook")
async def webhook(request: Request, handler: TelegramCommandHandler = Depends(get_command_handler)):
    """Receive bot updates. Always acknowledged so Telegram does not redeliver."""

    try:
        update = await request.json()
    except ValueError:
        logger.warning("webhook_invalid_body")
        return {"ok": True}
    if isinstance(update, dict):
        await run_in_threadpool(handler.handle_update, update)
    return {"ok": True}


@router.post("/set-webhook")
def set_webhook(request: Request, notifier: NotificationService = Depends(get_notification_service)):
    base_url = settings.public_base_url or str(request.base_url)
    webhook_url = f"{base_url.rstrip('/')}/api/telegram/webhook"
    result = notifier.register_webhook(webhook_url)
    return envelope(
        result.success,
        "Webhook set successfully" if result.success else "Failed to set webhook",
        data={"url": webhook_url},
        error=result.error,
    )


@router.get("/webhook-info")
def webhook_info(notifier: NotificationService = Depends(get_notification_service)):
    result = notifier.webhook_info()
    return envelope(
        result.success,
        "Webhook info retrieved" if result.success else "Failed to get webhook info",
        data=result.data,
        error=result.error,
    )


@router.get("/test")
def webhook_test(request: Request):
    return envelope(
        True,
        "Telegram webhook is working",
        data={"webhookUrl": f"{str(request.base_url).rstrip('/')}/api/telegram/webhook"},
    )


@router.post("/test-notification")
def test_notification(notifier: NotificationService = Depends(get_notification_service)):
    sample = build_sample_payment(ProductType.WEEKLY.value)
    result = notifier.notify(sample, ProductType.WEEKLY)
    return envelope(
        result.success,
        "Test notification sent" if result.success else "Failed to send test notification",
        data={"transactionId": sample.transaction_id},
        error=result.error,
    )


@router.post("/mark-delivered/{transaction_id}")
def mark_delivered(transaction_id: str, service: PaymentService = Depends(get_payment_service)):
    result = service.mark_completed_by_transaction_id(transaction_id)
    return envelope(
        True,
        "Order marked as delivered",
        data={"transactionId": result.payment.transaction_id, "notificationSent": result.notification.success},
    )


@router.post("/mark-failed/{transaction_id}")
def mark_failed(
    transaction_id: str,
    req: MarkFailedRequest | None = None,
    service: PaymentService = Depends(get_payment_service),
):
    reason = req.reason if req else None
    result = service.mark_failed(transaction_id, reason)
    return envelope(
        True,
        "Order marked as failed",
        data={
            "transactionId": result.payment.transaction_id,
            "reason": result.payment.failed_reason,
            "notificationSent": result.notification.success,
        },
    )
