"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "obsidian-decision-engine"
    engine_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Auth - only enforced outside development when set
    api_key: Optional[str] = None

    # Idempotency
    idempotency_ttl_seconds: int = 600

    # Input limits
    max_debt_accounts: int = 50
    max_monthly_income: float = 100_000_000 / 12
    max_debt_balance: float = 50_000_000
    max_purchase_amount: float = 10_000_000
    max_description_length: int = 500

    # Debt planning
    max_schedule_months_returned: int = 120
    default_extra_payment: float = 100.0
    default_max_months: int = 360

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key) and self.environment != "development"


settings = Settings()
