"""Environment-driven settings for the payment service.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "planpay-payments"
    log_level: str = "INFO"
    postgres_dsn: str
    api_key: str
    mercadopago_access_token: str
    mercadopago_base_url: str = "https://api.mercadopago.com"
    gateway_timeout_seconds: float = 10.0
    # Off by default: charges carry no idempotency key unless enabled.
    gateway_idempotency_keys: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
