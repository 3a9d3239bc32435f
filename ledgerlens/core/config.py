from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledgerlens.models.constants import BASE_REPORTING_CURRENCY


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    REPORTING_CURRENCY, LEDGER_DATA_FILE, RATES_CACHE_TTL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "ledgerlens"
    debug: bool = False
    version: str = "0.1.0"

    # Currencies
    reporting_currency: str = BASE_REPORTING_CURRENCY
    preferred_currency: str = "USD"

    # Ledger source for the in-memory repository (JSON export of the ledger)
    ledger_data_file: Optional[Path] = None

    # Exchange rates / caching
    rates_cache_ttl_seconds: int = 12 * 60 * 60
    exchange_api_base_url: AnyHttpUrl = "https://api.frankfurter.app"
    http_timeout_seconds: float = 8.0

    # Allowed: 'static' (built-in table), 'external-http' (Frankfurter API)
    exchange_rate_provider: str = "static"

    # Feature toggles
    enable_rate_override: bool = True

    # Budget progress thresholds (percent of limit)
    budget_warn_pct: int = 60
    budget_danger_pct: int = 85

    def init_post_load(self) -> None:
        """Normalize currency codes and validate enumerated / ranged fields."""
        self.reporting_currency = self.reporting_currency.strip().upper()
        self.preferred_currency = self.preferred_currency.strip().upper()
        allowed = {"static", "external-http"}
        if self.exchange_rate_provider not in allowed:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {allowed}"
            )
        if not (1 <= self.budget_warn_pct < self.budget_danger_pct <= 100):
            raise ValueError(
                "Invalid budget thresholds: require 1 <= warn < danger <= 100"
            )
        if self.ledger_data_file is not None and not self.ledger_data_file.exists():
            raise ValueError(f"ledger_data_file '{self.ledger_data_file}' does not exist")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
