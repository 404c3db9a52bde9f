"""
Application configuration

SECURITY: Defaults are fail-safe for production.
- DEBUG defaults to False
- Runtime validation catches insecure configurations
"""
import logging
import os

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App - defaults are PRODUCTION safe
    APP_NAME: str = "ShipSplit"
    DEBUG: bool = False  # SECURE DEFAULT: off in production
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Shipping gateway (order source, carrier directory, label issuance)
    SHIPPING_GATEWAY_URL: str = "https://api.shipengine.com/v1"
    SHIPPING_GATEWAY_API_KEY: str = ""
    SHIPPING_GATEWAY_TIMEOUT_SECONDS: float = 30.0
    ORDER_SOURCE_PATH: str = "/orders/{order_id}"
    CARRIER_DIRECTORY_PATH: str = "/carriers"
    LABEL_ISSUANCE_PATH: str = "/labels"

    # Package defaults (inches)
    DEFAULT_PACKAGE_LENGTH: float = 12.0
    DEFAULT_PACKAGE_WIDTH: float = 10.0
    DEFAULT_PACKAGE_HEIGHT: float = 6.0

    DEFAULT_COUNTRY_CODE: str = "US"
    DEFAULT_ITEM_WEIGHT_UNIT: str = "oz"

    @field_validator("SHIPPING_GATEWAY_URL")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("LOG_LEVEL", "DEFAULT_COUNTRY_CODE")
    @classmethod
    def upper_case(cls, v):
        return v.upper()

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production":
            errors = []

            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )

            if not self.SHIPPING_GATEWAY_API_KEY:
                errors.append(
                    "SHIPPING_GATEWAY_API_KEY is required in production. "
                    "Labels cannot be purchased without it."
                )

            if errors:
                raise ValueError(
                    "PRODUCTION CONFIGURATION VIOLATIONS:\n" + "\n".join(f"  - {e}" for e in errors)
                )

        return self


# Try to load settings, provide helpful error on failure
try:
    settings = Settings()
except Exception:
    # In development, allow fallback defaults
    if os.getenv("ENVIRONMENT", "development") == "development":
        logger.warning(
            "Settings validation failed, using development defaults. "
            "Set SHIPPING_GATEWAY_API_KEY in .env file."
        )
        os.environ.setdefault("ENVIRONMENT", "development")
        settings = Settings()
    else:
        raise
