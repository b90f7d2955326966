"""Client-side tunables, read from ``STOREFRONT_*`` environment variables.

Backend providers (databases, brokers, event store) are configured in
``domain.toml`` and selected with ``PROTEAN_ENV``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GUEST_CART_KEY = "guestCart"
LAST_ACTIVITY_KEY = "lastActivity"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOREFRONT_")

    inactivity_timeout_seconds: float = Field(default=15 * 60, gt=0)
    inactivity_check_interval_seconds: float = Field(default=60, gt=0)
    cart_save_debounce_seconds: float = Field(default=1.0, ge=0)
    stock_write_attempts: int = Field(default=5, ge=1)
    base_shipping_cost: float = Field(default=40.0, ge=0)


def get_settings() -> Settings:
    return Settings()
