"""FastAPI dependencies resolving the services built at application startup."""

from fastapi import Request

from topup.services.catalog.service import CatalogService
from topup.services.notification.commands import TelegramCommandHandler
from topup.services.notification.service import NotificationService
from topup.services.payments.service import PaymentService
from topup.services.sms.service import SmsService


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_command_handler(request: Request) -> TelegramCommandHandler:
    return request.app.state.command_handler


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_sms_service(request: Request) -> SmsService:
    return request.app.state.sms_service
