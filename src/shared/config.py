"""Application settings, read from the environment (and an optional ``.env``)."""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str | None = None

    # Unset means the in-memory store, e.g. "sqlite:///storefront.db" for SQLAlchemy
    ORDER_STORE_URL: str | None = None

    # Unset means carts live only in process memory
    CART_STORAGE_DIR: str | None = None
    CART_STORAGE_KEY: str = "storefront-cart"

    # Unset means notifications are dispatched in-process
    NOTIFIER_URL: str | None = None
    NOTIFIER_TIMEOUT_SECS: float = 5.0

    STRICT_STATUS_TRANSITIONS: bool = False

    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("15")
    SHIPPING_FEE: Decimal = Decimal("2")
    CURRENCY: str = "KWD"


@lru_cache
def get_settings() -> Settings:
    return Settings()
