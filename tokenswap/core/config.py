from decimal import ROUND_HALF_UP
from functools import lru_cache

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenswap.services.decimal_engine import DecimalConfig


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, PRICES_URL,
    CATALOG_SOURCE, TX_FAILURE_RATE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Token Swap"
    debug: bool = True
    version: str = "0.1.0"

    # Price feed
    prices_url: AnyHttpUrl = "https://interview.switcheo.com/prices.json"
    token_icons_base_url: str = (
        "https://raw.githubusercontent.com/Switcheo/token-icons/main/tokens/"
    )
    http_timeout_seconds: float = 5.0
    http_retries: int = 2

    # Allowed: 'live' (HTTP feed with built-in fallback), 'static' (built-in catalog only)
    catalog_source: str = "live"
    catalog_ttl_seconds: int = 300

    # Decimal arithmetic
    decimal_places: int = 30

    # Input debounce windows
    amount_debounce_seconds: float = 0.3
    search_debounce_seconds: float = 0.5

    # Simulated transaction
    tx_delay_min_seconds: float = 2.0
    tx_delay_max_seconds: float = 3.0
    tx_failure_rate: float = 0.1

    def init_post_load(self) -> None:
        """Validate cross-field rules after loading."""
        allowed = {"live", "static"}
        if self.catalog_source not in allowed:
            raise ValueError(
                f"Unsupported catalog_source '{self.catalog_source}'. Allowed: {allowed}"
            )
        if self.decimal_places < 30:
            raise ValueError("decimal_places must be at least 30")
        if not 0 <= self.tx_delay_min_seconds <= self.tx_delay_max_seconds:
            raise ValueError("tx delay window must satisfy 0 <= min <= max")
        if not 0.0 <= self.tx_failure_rate <= 1.0:
            raise ValueError("tx_failure_rate must be within [0, 1]")
        if not self.token_icons_base_url.endswith("/"):
            self.token_icons_base_url += "/"

    def decimal_config(self) -> DecimalConfig:
        return DecimalConfig(decimal_places=self.decimal_places, rounding=ROUND_HALF_UP)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
