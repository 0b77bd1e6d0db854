from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "dealpass"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/dealpass.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Stripe
    stripe_api_key: str = ""
    stripe_webhook_secret: str = ""

    # Coupon ledger
    LEDGER_BACKEND: str = "database"  # "database" or "memory"
    COUPON_VALIDITY_DAYS: int = 30
    REDEMPTION_LOG_UNKNOWN_CODES: bool = False

    # Webhook reconciliation
    PROCESSED_EVENT_RETENTION_DAYS: int = 30

    # Scanner
    SCANNER_INTERVAL_SECONDS: float = 0.5

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def memory_ledger_enabled(self) -> bool:
        return self.LEDGER_BACKEND == "memory"


settings = Settings()
