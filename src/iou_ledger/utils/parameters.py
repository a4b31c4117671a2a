"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models. API tokens
may be supplied through the environment (``IOU_LEDGER_BASEROW__API_TOKEN``,
``IOU_LEDGER_BEEMINDER__API_TOKEN``) instead of the YAML file.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from iou_ledger.utils.exceptions import ConfigurationError

LEDGER_DATE_PATTERN = r"^\d{4}\.\d{2}\.\d{2}$"


class AccountPairConfig(BaseModel):
    """Ledger accounts an external source writes entries between."""

    from_account: str = Field(alias="from")
    to_account: str = Field(alias="to")

    model_config = ConfigDict(populate_by_name=True)


class BaserowConfig(BaseModel):
    """Baserow (time table) API configuration."""

    domain: str
    api_token: str = ""
    table_id: str
    user_id: int = 2
    lookback_weeks: int = 2
    timezone: str = "America/New_York"
    timeout_seconds: float = 30.0


class BeeminderConfig(BaseModel):
    """Beeminder (goal tracking) API configuration."""

    base_url: str = "https://www.beeminder.com/api/v1"
    api_token: str = ""
    username: str = "me"
    goal: str
    timeout_seconds: float = 30.0


class ReconciliationConfig(BaseModel):
    """Reconciliation rules applied when merging source hours into the ledger."""

    rate: float = Field(35, gt=0)
    cutoff_date: str = Field("2025.03.15", pattern=LEDGER_DATE_PATTERN)
    default_comment: str = "hours"
    timesheet_accounts: AccountPairConfig = Field(
        default_factory=lambda: AccountPairConfig(from_account="ppd", to_account="la")
    )
    goal_accounts: AccountPairConfig = Field(
        default_factory=lambda: AccountPairConfig(from_account="ppd", to_account="na")
    )


class ImportConfig(BaseModel):
    """Defaults for the manual conversion and goal import tools."""

    rate: float = 35
    from_account: str = "ppd"
    to_account: str = "la"
    comment: str = "hours"
    timezone: str = "UTC"


class OutputConfig(BaseModel):
    """Output configuration."""

    dir: str = "output"
    snapshot_log: str = "ledger_snapshots.jsonl"
    invoice_csv: str = "invoice.csv"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    baserow: BaserowConfig
    beeminder: BeeminderConfig
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="IOU_LEDGER_", env_nested_delimiter="__", case_sensitive=False
    )


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_baserow_config(self) -> BaserowConfig:
        """Get Baserow configuration."""
        return self.config.baserow

    def get_beeminder_config(self) -> BeeminderConfig:
        """Get Beeminder configuration."""
        return self.config.beeminder

    def get_reconciliation_config(self) -> ReconciliationConfig:
        """Get reconciliation rules."""
        return self.config.reconciliation

    def get_import_config(self) -> ImportConfig:
        """Get manual import defaults."""
        return self.config.imports

    def get_output_config(self) -> OutputConfig:
        """Get output configuration."""
        return self.config.output

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
