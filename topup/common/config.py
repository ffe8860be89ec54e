"""Central environment-driven settings for the relay process.

The API process loads this once at startup. Behavior is controlled by
environment variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "topup-api"
    log_level: str = "INFO"
    postgres_dsn: str
    telegram_bot_token: str = ""
    telegram_admin_chat_id: str = ""
    telegram_api_url: str = "https://api.telegram.org"
    notification_timeout_seconds: float = 5.0
    redemption_code_prefix: str = "Ktp"
    display_timezone: str = "Asia/Dhaka"
    payment_number: str = "01766325020"
    public_base_url: str | None = None
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8081",
        "http://10.0.2.2:8081",
        "https://robotopup.vercel.app",
    ]
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
