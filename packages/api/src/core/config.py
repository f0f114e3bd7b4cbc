# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
JWT_SECRET has no default: the process refuses to start without it.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[4]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "customer-portal"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # -- CORS --
    CORS_ORIGIN: str = Field(
        default="http://localhost:8081",
        description="Single origin allowed to call the API with credentials.",
    )
    CORS_MAX_AGE: int = 12 * 60 * 60

    # -- Auth --
    JWT_SECRET: str = Field(description="HMAC-SHA256 signing secret for bearer tokens.")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL_MINUTES: int = Field(
        default=30 * 24 * 60,
        description="Bearer token lifetime. 0 issues tokens without an exp claim.",
    )
    OTP_VALIDITY_MINUTES: int = 10

    # -- Email (SMTP over SSL) --
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_SENDER: str = Field(
        default="",
        description="From address for OTP mail. Defaults to SMTP_USER when empty.",
    )
    SMTP_TIMEOUT_SECONDS: float = 15.0

    # -- Push notifications --
    PUSH_SERVICE_URL: str = "https://exp.host/--/api/v2/push/send"
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # -- M-PESA Daraja --
    DARAJA_ENVIRONMENT: Literal["sandbox", "production"] = "sandbox"
    DARAJA_CONSUMER_KEY: str = ""
    DARAJA_CONSUMER_SECRET: str = ""
    DARAJA_PASSKEY: str = ""
    DARAJA_BUSINESS_SHORT_CODE: str = "174379"
    DARAJA_CALLBACK_URL: str = "http://localhost:8080/mpesa/callback"
    DARAJA_TIMEOUT_SECONDS: float = 30.0
    DARAJA_TRANSACTION_DESC: str = "Payment of Installment"
    PAYMENT_RECONCILE_AFTER_MINUTES: int = Field(
        default=5,
        description="Pending payments older than this are queried by the reconcile sweep.",
    )

    # -- Statements --
    COMPANY_NAME: str = "Optiven Limited"
    COMPANY_CONTACT_LINE: str = "Phone: +254790300300 | Email: info@optiven.co.ke"

    @property
    def daraja_base_url(self) -> str:
        if self.DARAJA_ENVIRONMENT == "production":
            return "https://api.safaricom.co.ke"
        return "https://sandbox.safaricom.co.ke"

    @property
    def daraja_configured(self) -> bool:
        return bool(self.DARAJA_CONSUMER_KEY and self.DARAJA_CONSUMER_SECRET and self.DARAJA_PASSKEY)


settings = Settings()
