"""Structured JSON logging with request and payment context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from topup.common.config import settings


trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")
transaction_id_ctx: ContextVar[str] = ContextVar("transaction_id", default="")

# httpx logs full request URLs at INFO, and Bot API URLs embed the token.
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class ContextFilter(logging.Filter):
    """Stamp each record with the service, request trace id and transaction id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.service_name
        record.trace_id = trace_id_ctx.get()
        record.transaction_id = transaction_id_ctx.get()
        return True


def configure_logging() -> None:
    """Send JSON lines to stdout from the root logger. Safe to call more than once."""

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(service_name)s %(trace_id)s %(transaction_id)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger("topup")
