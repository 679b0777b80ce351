# earnings_ledger/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment; every field has a default so
    # the ledger can be imported by workers and tests without a .env file.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    DATABASE_URL_LOCAL: str = "sqlite:///./earnings_ledger.db"
    DATABASE_URL_PROD: str = ""

    # --- Fee table (percentages are 0-100, amounts are cents) ---
    PLATFORM_FEE_PERCENT: float = 10.0
    PLATFORM_FEE_MIN_CENTS: int = 50
    PROCESSING_FEE_PERCENT: float = 2.9
    PROCESSING_FEE_FIXED_CENTS: int = 30

    # Flat rate used by the organizer balance rollup (not rail-aware)
    PAYOUT_PLATFORM_FEE_PERCENT: float = 10.0
    MINIMUM_PAYOUT_AMOUNT_CENTS: int = 5000

    # --- Settlement ---
    SETTLEMENT_HOLD_DAYS: int = 7
    SETTLEMENT_SWEEP_INTERVAL_MINUTES: int = 60
    ENABLE_SCHEDULER: bool = True

    # Max event ids per IN (...) clause when loading an organizer's tickets
    TICKET_QUERY_BATCH_SIZE: int = 10

    @property
    def DATABASE_URL(self) -> str:
        if self.ENV == "local" or not self.DATABASE_URL_PROD:
            return self.DATABASE_URL_LOCAL
        return self.DATABASE_URL_PROD


# Create a single instance of the settings
settings = Settings()
