"""
Restaurant Sales Analytics
Configuration

Every tunable of the API, the dashboard client and the tools, read from the
environment (or ``.env``) through pydantic-settings. Each section has its own
variable prefix.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "staging", "production", "testing")


class DatabaseSettings(BaseSettings):
    """Sales database connection (POSTGRES_*)"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Server host")
    port: int = Field(default=5432, description="Server port")
    db: str = Field(default="restaurant_analytics", description="Database name, POSTGRES_DB")
    user: str = Field(default="analytics", description="Read-only reporting role")
    password: SecretStr = Field(default="analytics", description="Role password")
    url: Optional[str] = Field(default=None, description="Complete async SQLAlchemy URL, wins over the parts above")

    pool_size: int = Field(default=10, description="Pooled connections per process")
    max_overflow: int = Field(default=5, description="Connections allowed above pool_size")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    echo: bool = Field(default=False, description="Log every SQL statement")

    @property
    def async_url(self) -> str:
        """POSTGRES_URL when set, otherwise an asyncpg URL built from the parts."""
        if self.url:
            return self.url
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.db}"


class SecuritySettings(BaseSettings):
    """Browser access to the API"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
        description="Origins allowed to call the API from a browser (JSON list)",
    )


class MonitoringSettings(BaseSettings):
    """Logging"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="json or text")


class ReportSettings(BaseSettings):
    """Report defaults applied at the request boundary (REPORT_*)"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    default_range_days: int = Field(default=30, description="Trailing window when no dates are given")
    product_limit: int = Field(default=10, description="Default top products limit")
    customer_limit: int = Field(default=20, description="Default top customers limit")
    inactive_days: int = Field(default=30, description="Default inactivity threshold in days")
    max_inactive_days: int = Field(default=3650, description="Largest accepted inactivity threshold")
    inactive_min_purchases: int = Field(default=3, description="Minimum purchases for an inactive customer")
    inactive_max_results: int = Field(default=50, description="Cap on inactive customers returned")
    max_limit: int = Field(default=100, description="Largest accepted limit parameter")


class DashboardSettings(BaseSettings):
    """Dashboard client (DASHBOARD_*)"""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    api_base_url: str = Field(default="http://localhost:8000", description="Analytics API base URL")
    timeout_seconds: float = Field(default=30.0, description="HTTP request timeout")


class Settings(BaseSettings):
    """
    Application settings.

    Sections are nested models, e.g. ``settings.reports.product_limit``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="restaurant-analytics", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV", description="One of ENVIRONMENTS")
    version: str = Field(default="1.0.0", alias="APP_VERSION")

    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    api_workers: int = Field(default=4, alias="API_WORKERS")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        env = v.strip().lower()
        if env not in ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}")
        return env

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings()
