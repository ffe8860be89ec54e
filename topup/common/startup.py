"""Startup-time config summary with secrets redacted."""

from pydantic_settings import BaseSettings

from topup.common.logging import logger

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN", "DSN")


def _display_value(name: str, value) -> str:
    if value is None or value == "":
        return "<unset>"
    if any(marker in name for marker in SECRET_MARKERS):
        return "<redacted>"
    return str(value)


def log_startup_config(config: BaseSettings, keys: list[str]) -> None:
    """Log the selected settings and warn when operator notifications cannot work."""

    values = config.model_dump()
    summary = {"service": values.get("service_name")}
    for key in keys:
        summary[key] = _display_value(key, values.get(key.lower()))
    logger.info("startup_config=%s", summary)

    if not values.get("telegram_bot_token") or not values.get("telegram_admin_chat_id"):
        logger.warning("telegram_not_configured notifications will be reported as failed")
