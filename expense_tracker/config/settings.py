"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which remote service the client talks to and
ensures configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = (
    "Food,Transport,Entertainment,Shopping,Bills,"
    "Healthcare,Education,Travel,Other"
)


class ExpenseApiSettings(BaseSettings):
    """Remote expense service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8080/api/",
        description="Base URL of the expense REST API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Transport timeout for every request"
    )
    list_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for the listing call on transport errors"
    )

    # Endpoint paths, relative to base_url
    list_path: str = Field(default="getExpenses")
    create_path: str = Field(default="addExpense")
    update_path: str = Field(
        default="expenses/{id}",
        description="Update path template, {id} is substituted"
    )
    delete_path: str = Field(
        default="delete/{id}",
        description="Delete path template, {id} is substituted"
    )

    @field_validator('base_url')
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Relative endpoint paths are joined onto the base URL."""
        return v if v.endswith("/") else v + "/"


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (console log rendering)"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )

    # Backend selection
    use_remote: bool = Field(
        default=True,
        description="Talk to the REST API; False uses the in-memory service"
    )

    # Presentation
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code used for display"
    )
    categories: str = Field(
        default=DEFAULT_CATEGORIES,
        description="Comma-separated list of categories offered in forms"
    )

    @property
    def categories_list(self) -> list[str]:
        """Get categories as a list."""
        return [c.strip() for c in self.categories.split(",") if c.strip()]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def expense_api(self) -> ExpenseApiSettings:
        return ExpenseApiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("expense_api", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
