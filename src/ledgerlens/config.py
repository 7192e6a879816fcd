"""
LedgerLens configuration management.

Supports loading from YAML files, environment variables, and keyword overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from ledgerlens.analyzers.periods import Granularity


class ExportConfig(BaseModel):
    """Defaults for report exports."""

    format: str = Field(default="csv", pattern="^(csv|json)$", description="Export format: csv or json")
    include_summary: bool = True
    include_time_series: bool = True
    include_categories: bool = True


class LoggingConfig(BaseModel):
    """Logging settings used by the CLI."""

    level: str = Field(default="WARNING", description="Root log level for the ledgerlens logger")


class LedgerLensConfig(BaseModel):
    """Root configuration for LedgerLens."""

    product_name: str = Field(default="ledgerlens", description="Prefix used in export filenames")
    currency: str = Field(default="USD")
    locale: str = Field(default="en_US")
    output_dir: str = Field(default="./ledgerlens_reports")
    default_granularity: Granularity = Granularity.MONTH

    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> LedgerLensConfig:
        """Load configuration from file, env vars, and overrides.

        Priority: overrides > env vars > config file > defaults.
        """
        data: dict[str, Any] = {}

        # 1. Load from YAML file if provided
        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

        # 2. Override from environment variables
        env_currency = os.environ.get("LEDGERLENS_CURRENCY")
        env_output = os.environ.get("LEDGERLENS_OUTPUT_DIR")
        env_level = os.environ.get("LEDGERLENS_LOG_LEVEL")
        env_format = os.environ.get("LEDGERLENS_EXPORT_FORMAT")

        if env_currency:
            data["currency"] = env_currency.upper()
        if env_output:
            data["output_dir"] = env_output

        if env_level:
            log_cfg = data.get("logging", {})
            log_cfg["level"] = env_level.upper()
            data["logging"] = log_cfg

        if env_format:
            export = data.get("export", {})
            export["format"] = env_format.lower()
            data["export"] = export

        # 3. Apply keyword overrides
        data.update(overrides)

        return cls.model_validate(data)
