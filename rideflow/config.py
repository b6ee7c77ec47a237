"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Entity store (in-memory SQLite by default; data is lost on restart)
    database_url: str = "sqlite+aiosqlite:///:memory:"
    seed_demo_data: bool = False

    # Pricing
    base_fare: float = 50.0  # INR
    rate_per_km: dict[str, float] = {
        "standard": 12.0,
        "premium": 20.0,
        "luxury": 35.0,
        "shared": 8.0,
        "express": 15.0,
    }
    quote_ttl_seconds: int = 300  # 5 minute cache window
    min_distance_km: float = 2.0
    max_distance_km: float = 22.0

    # HTTP
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
