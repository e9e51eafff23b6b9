"""Configuration package."""

from budget_tracker.config.settings import (
    AppSettings,
    BudgetSettings,
    ExportSettings,
    ImportSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "ExportSettings",
    "ImportSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
