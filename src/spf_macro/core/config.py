"""Centralized configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Macro expansion
    receiving_host: Optional[str] = None  # Value of %{r} when unbound
    max_domain_length: int = 253
    max_ptr_names: int = 10

    # DNS resolver
    dns_timeout: float = 2.0
    dns_lifetime: float = 5.0
    ptr_cache_ttl: int = 300
    cache_prefix: str = "spf-macro:"

    # Redis configuration
    redis_ip: Optional[str] = None
    redis_port: int = 6379
    redis_db: int = 0

    # Sentry configuration (optional)
    sentry_dsn: Optional[str] = None
    sentry_environment: str = "production"
    sentry_traces_sample_rate: float = 1.0

    log_level: str = "INFO"

    @property
    def receiving_host_name(self) -> str:
        """Return the receiving host, or 'unknown' when not configured."""
        if self.receiving_host and self.receiving_host.strip():
            return self.receiving_host.strip().rstrip(".")

        return "unknown"

    @property
    def use_redis(self) -> bool:
        """Check if Redis is configured."""
        return self.redis_ip is not None

    @property
    def redis_url(self) -> str:
        """Return Redis connection URL."""
        return f"redis://{self.redis_ip}:{self.redis_port}/{self.redis_db}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
