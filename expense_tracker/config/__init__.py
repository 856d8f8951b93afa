"""Configuration package."""

from expense_tracker.config.settings import (
    AppSettings,
    ExpenseApiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ExpenseApiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
