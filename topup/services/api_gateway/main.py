"""Public HTTP entrypoint for the storefront relay.

Builds the services once per process, mounts every router and maps domain
errors to the `{success, message}` envelope.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from topup.common.config import settings
from topup.common.db import SessionLocal, db_healthcheck
from topup.common.errors import DomainError
from topup.common.logging import configure_logging, logger, trace_id_ctx, transaction_id_ctx
from topup.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from topup.common.schemas import envelope
from topup.common.startup import log_startup_config
from topup.common.tracing import instrument_app, setup_tracing
from topup.services.catalog.routes import router as catalog_router
from topup.services.catalog.service import CatalogService
from topup.services.notification.commands import TelegramCommandHandler
from topup.services.notification.routes import router as telegram_router
from topup.services.notification.service import NotificationService
from topup.services.notification.telegram import TelegramClient
from topup.services.payments.routes import router as payments_router
from topup.services.payments.service import PaymentService
from topup.services.sms.routes import router as sms_router
from topup.services.sms.service import SmsService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings,
    [
        "SERVICE_NAME",
        "POSTGRES_DSN",
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_ADMIN_CHAT_ID",
        "PUBLIC_BASE_URL",
        "DISPLAY_TIMEZONE",
        "TRACING_ENABLED",
    ],
)

AVAILABLE_ENDPOINTS = [
    "GET /api/health",
    "GET /api/products",
    "POST /api/payments/verify",
    "GET /api/payments/status/:transactionId",
    "POST /api/telegram/webhook",
    "POST /api/sms/receive",
    "GET /api/sms",
]


def build_notifier() -> NotificationService:
    client = TelegramClient(
        settings.telegram_bot_token,
        api_url=settings.telegram_api_url,
        timeout=settings.notification_timeout_seconds,
        service_name=settings.service_name,
    )
    return NotificationService(
        client,
        settings.telegram_admin_chat_id,
        code_prefix=settings.redemption_code_prefix,
        display_timezone=settings.display_timezone,
        service_name=settings.service_name,
    )


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "invalid value")})
    return errors


def create_app(session_factory=SessionLocal, notifier: NotificationService | None = None) -> FastAPI:
    """Wire services, routers, middleware and error handlers into one app."""

    notifier = notifier or build_notifier()
    payment_service = PaymentService(
        session_factory,
        notifier,
        payment_number=settings.payment_number,
        service_name=settings.service_name,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info("telegram_configured=%s", notifier.client.configured)
        yield
        notifier.client.close()

    app = FastAPI(title="Top-up Relay", lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.notification_service = notifier
    app.state.payment_service = payment_service
    app.state.catalog_service = CatalogService(session_factory)
    app.state.sms_service = SmsService(
        session_factory,
        display_timezone=settings.display_timezone,
        service_name=settings.service_name,
    )
    app.state.command_handler = TelegramCommandHandler(payment_service, notifier)
    instrument_app(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Tag the request with a trace id and record count and latency."""

        trace_id = request.headers.get("x-trace-id") or str(uuid4())
        trace_id_ctx.set(trace_id)
        transaction_id_ctx.set("")
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            response.headers["X-Trace-Id"] = trace_id
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.exception_handler(DomainError)
    async def domain_error_handler(_: Request, exc: DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(False, exc.message, error=exc.error),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError):
        errors = _validation_errors(exc)
        fields = ", ".join(e["field"] for e in errors if e["field"])
        message = f"Missing or invalid fields: {fields}" if fields else "Invalid request"
        return JSONResponse(status_code=400, content=envelope(False, message, errors=errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content=envelope(
                    False,
                    "Route not found",
                    path=request.url.path,
                    availableEndpoints=AVAILABLE_ENDPOINTS,
                ),
            )
        return JSONResponse(status_code=exc.status_code, content=envelope(False, str(exc.detail)))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(_: Request, exc: Exception):
        logger.exception("unhandled_error error=%s", exc)
        return JSONResponse(status_code=500, content=envelope(False, "Something went wrong!"))

    app.include_router(payments_router)
    app.include_router(telegram_router)
    app.include_router(catalog_router)
    app.include_router(sms_router)

    @app.get("/api/health")
    def health():
        """Liveness probe."""

        return envelope(
            True,
            "Server is running",
            status="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            telegramConfigured=notifier.client.configured,
        )

    @app.get("/health/db")
    def health_db():
        """Readiness probe against the payment store."""

        ok, error = db_healthcheck(session_factory)
        if not ok:
            return JSONResponse(status_code=503, content=envelope(False, "Database unavailable", error=error))
        return envelope(True, "Database reachable")

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    return app


app = create_app()
