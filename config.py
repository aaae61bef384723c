from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List
from functools import lru_cache

DEFAULT_ACCOUNTS: Dict[int, int] = {
    1: 100_000,
    2: 80_000,
    3: 1_000_000,
    4: 10_000_000,
    5: 500_000,
}

# Account ids travel in the URL as a single unsigned byte
MAX_ACCOUNT_ID = 255


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    environment: str = "production"  # development, production or testing
    app_name: str = "Account Ledger API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Rate limiting, off by default for benchmark traffic
    rate_limit_enabled: bool = False
    rate_limit: str = "1000/second"

    # CORS settings
    allowed_origins: List[str] = ["*"]
    allowed_methods: List[str] = ["GET", "POST", "OPTIONS"]
    allowed_headers: List[str] = ["*"]

    # Business logic settings
    history_capacity: int = Field(default=10, ge=1)
    accounts: Dict[int, int] = Field(default_factory=lambda: dict(DEFAULT_ACCOUNTS))

    @field_validator("accounts")
    @classmethod
    def validate_accounts(cls, v):
        for account_id, limit in v.items():
            if not 0 <= account_id <= MAX_ACCOUNT_ID:
                raise ValueError(f"Account id {account_id} outside 0..{MAX_ACCOUNT_ID}")
            if limit < 0:
                raise ValueError(f"Account {account_id} has a negative limit")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings for the profile named by ENVIRONMENT."""
    return get_settings_for_environment(Settings().environment)


# Environment-specific configurations
class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"
    log_format: str = "text"


class ProductionSettings(Settings):
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: List[str] = []  # Must be specified in production


class TestingSettings(Settings):
    debug: bool = True
    log_level: str = "WARNING"  # Reduce noise in tests
    rate_limit_enabled: bool = False


def get_settings_for_environment(env: str = "development") -> Settings:
    """Get settings for specific environment."""
    settings_map = {
        "development": DevelopmentSettings,
        "production": ProductionSettings,
        "testing": TestingSettings,
    }

    settings_class = settings_map.get(env.lower(), Settings)
    return settings_class()
