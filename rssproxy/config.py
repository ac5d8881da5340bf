"""rssproxy configuration management."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Outbound fetch
    fetch_timeout: float = Field(default=15.0)
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
        )
    )
    # Hosts (and their subdomains) fetched without TLS certificate checks.
    # Every entry is a trust exception and must be reviewed before it is added.
    insecure_tls_hosts: list[str] = Field(default_factory=list)

    # API
    rssproxy_host: str = Field(default="127.0.0.1")
    rssproxy_port: int = Field(default=3001)
    disconnect_poll_seconds: float = Field(default=0.5)
    log_level: str = Field(default="INFO")

    # Client cache / refresh
    proxy_endpoint: str = Field(default="http://localhost:3001/api/rss")
    refresh_interval_seconds: int = Field(default=600)
    refresh_check_seconds: int = Field(default=60)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
