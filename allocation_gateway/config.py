"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "allocation-gateway"
    log_level: str = "INFO"
    default_currency: str = "NGN"

    # Split limits
    max_split_parties: int = 10
    max_payment_methods: int = 5

    # Installment limits
    max_installments: int = 24
    max_interest_rate_percent: float = 50.0
    partial_payment_min_ratio: float = 0.5

    # Layaway limits
    min_deposit_percent: float = 10.0
    max_deposit_percent: float = 50.0
    layaway_default_period_days: int = 90
    layaway_min_period_days: int = 7
    layaway_max_period_days: int = 180


settings = Settings()
