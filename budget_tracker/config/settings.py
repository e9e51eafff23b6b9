"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Anything that is policy rather than logic (colors, file formats,
the limit credential, storage location) lives in settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BudgetSettings(BaseSettings):
    """Budget defaults, the limit-change credential and status colors."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_monthly_limit: float = Field(
        default=1000.0,
        gt=0,
        description="Monthly limit used before the user sets one"
    )
    limit_password: Optional[SecretStr] = Field(
        default=None,
        description="Credential required to change the monthly limit (unset = no gate)"
    )
    trend_window_days: int = Field(
        default=7,
        ge=2,
        le=31,
        description="Number of trailing days sampled for the spending trend"
    )

    # Status colors (presentation metadata)
    color_excellent: str = Field(default="#46988B")
    color_good: str = Field(default="#46988B")
    color_bad: str = Field(default="#EED668")
    color_worst: str = Field(default="#E0533D")
    color_not_configured: str = Field(default="#9CA3AF")

    @property
    def status_colors(self) -> dict[str, str]:
        """Status value -> display color."""
        return {
            "excellent": self.color_excellent,
            "good": self.color_good,
            "bad": self.color_bad,
            "worst": self.color_worst,
            "not_configured": self.color_not_configured,
        }


class StorageSettings(BaseSettings):
    """Persistence backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend to use"
    )
    data_dir: str = Field(
        default="./data",
        description="Directory for the JSON file backend"
    )
    budget_key: str = Field(
        default="budgetInfo",
        min_length=1,
        description="Key the budget snapshot is stored under"
    )


class ImportSettings(BaseSettings):
    """Spreadsheet and SMS import configuration."""

    model_config = SettingsConfigDict(
        env_prefix="IMPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    sms_description_length: int = Field(
        default=50,
        ge=1,
        le=500,
        description="How many leading SMS characters become the description"
    )
    supported_file_formats: str = Field(
        default="xlsx,xls,csv",
        description="Comma-separated list of importable file extensions"
    )
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum import file size in MB"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_file_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class ExportSettings(BaseSettings):
    """Export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    date_format: str = Field(
        default="%m/%d/%Y",
        description="strftime format for dates in delimited exports"
    )
    include_description: bool = Field(
        default=True,
        description="Include the Description column by default"
    )
    default_format: str = Field(
        default="csv",
        pattern="^(csv|json)$",
        description="Export format used when none is given"
    )


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
        description="Enable debug mode"
    )

    # Validation thresholds
    max_expense_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are flagged for review (not rejected)"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an expense date can be"
    )

    @field_validator('app_environment')
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()


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
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def importing(self) -> ImportSettings:
        return ImportSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

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

    Returns a dict of {setting_name: is_valid} plus
    {setting_name}_error entries for failures.
    """
    results = {}
    settings = get_settings()

    for name in ("budget", "storage", "importing", "export", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
