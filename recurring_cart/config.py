"""
Configuration management for recurring cart totalization.

Uses Pydantic settings for validation and environment variable support.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TotalsSettings(BaseSettings):
    """Cart totalization configuration."""

    model_config = SettingsConfigDict(
        env_prefix='RECURRING_CART_',
        env_file='.env',
        extra='ignore'
    )

    price_decimals: int = Field(default=2, ge=0, le=8, description='Decimal places of prices and totals')
    calc_shipping: bool = Field(default=True, description='Whether shipping is calculated at all')
    automatic_payments_enabled: bool = Field(
        default=True,
        description='Whether renewals can be charged automatically'
    )
    tax_rate: float = Field(default=0.0, ge=0, description='Flat tax rate, e.g. 0.2 for 20%')
    prices_include_tax: bool = Field(default=False, description='Catalog prices are entered tax inclusive')
    shipping_flat_rate: float = Field(default=0.0, ge=0, description='Flat rate shipping cost per package')
    shipping_per_item: float = Field(default=0.0, ge=0, description='Flat rate shipping cost per item')
    free_shipping_min_amount: Optional[float] = Field(
        default=None,
        description='Package cost from which free shipping is offered'
    )


class RedisSettings(BaseSettings):
    """Redis configuration for session storage."""

    model_config = SettingsConfigDict(
        env_prefix='REDIS_',
        env_file='.env',
        extra='ignore'
    )

    host: str = Field(default='localhost', description='Redis host')
    port: int = Field(default=6379, description='Redis port')
    db: int = Field(default=0, description='Redis database number')
    password: Optional[str] = Field(default=None, description='Redis password')
    ssl: bool = Field(default=False, description='Use SSL connection')
    session_prefix: str = Field(default='cart_session', description='Key prefix of session values')
    session_ttl: int = Field(default=172800, description='Session expiry in seconds')

    @property
    def url(self) -> str:
        """Build Redis URL."""
        auth = f":{self.password}@" if self.password else ""
        protocol = "rediss" if self.ssl else "redis"
        return f"{protocol}://{auth}{self.host}:{self.port}/{self.db}"


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    app_name: str = Field(default='Recurring Cart')

    # Logging
    log_level: str = Field(default='INFO')
    log_format: str = Field(default='text')  # json or text

    # Session
    session_backend: str = Field(default='memory')  # memory or redis

    # Sub-settings
    totals: TotalsSettings = Field(default_factory=TotalsSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)

    @field_validator('log_format', 'session_backend')
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('session_backend')
    @classmethod
    def validate_session_backend(cls, v: str) -> str:
        if v not in ('memory', 'redis'):
            raise ValueError("session_backend must be 'memory' or 'redis'")
        return v


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return AppSettings()
