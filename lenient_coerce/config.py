"""
Configuration models and YAML I/O for lenient-coerce.

Key models:
- CoercionConfig: Top-level config (date layouts + serial dates + column schema).
- SerialDateConfig: Serial-date fallback window and epoch.

Key functions:
- load_config(path) -> CoercionConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Example ``coerce.yaml``::

    date_formats:
      - "%Y-%m-%d"
      - "%d/%m/%Y"
    serial_dates:
      enabled: true
      epoch: "1899-12-30T00:00:00"
      min_days: -693593
      max_days: 2958465
    columns:
      price: float
      volume: int?
      trade_date: datetime

Validation happens at load time: every layout must compile and every
column kind name must be known, so a bad config fails before any data is
touched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from lenient_coerce.dates import (
    DEFAULT_DATE_FORMATS,
    SERIAL_EPOCH,
    SERIAL_MAX_DAYS,
    SERIAL_MIN_DAYS,
    compile_layout,
)
from lenient_coerce.exceptions import ConfigValidationError
from lenient_coerce.kinds import resolve_kind_name

logger = logging.getLogger(__name__)


class SerialDateConfig(BaseModel):
    """Numeric serial-date fallback settings."""

    enabled: bool = Field(
        True, description="If False, text that matches no layout is never read as a day count"
    )
    epoch: datetime = Field(SERIAL_EPOCH, description="Day zero of the serial count")
    min_days: float = Field(SERIAL_MIN_DAYS, description="Smallest accepted day count")
    max_days: float = Field(SERIAL_MAX_DAYS, description="Largest accepted day count")

    @model_validator(mode="after")
    def _check_window(self) -> SerialDateConfig:
        if self.min_days > self.max_days:
            raise ValueError(
                f"serial_dates.min_days ({self.min_days}) must not exceed "
                f"max_days ({self.max_days})"
            )
        return self


class CoercionConfig(BaseModel):
    """Top-level configuration for lenient-coerce."""

    date_formats: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DATE_FORMATS),
        description="Accepted date layouts, tried in order ('o' = round-trip timestamp)",
    )
    serial_dates: SerialDateConfig = Field(default_factory=SerialDateConfig)
    columns: dict[str, str] = Field(
        default_factory=dict,
        description="Column schema: key = column name, value = kind name (e.g. 'int?')",
    )

    @field_validator("date_formats")
    @classmethod
    def _check_layouts(cls, layouts: list[str]) -> list[str]:
        if not layouts:
            raise ValueError("date_formats must contain at least one layout")
        for layout in layouts:
            compile_layout(layout)
        return layouts

    @field_validator("columns")
    @classmethod
    def _check_kind_names(cls, columns: dict[str, str]) -> dict[str, str]:
        for name in columns.values():
            resolve_kind_name(name)
        return columns

    def column_kinds(self) -> dict[str, object]:
        """Resolve the ``columns`` schema into kind descriptors."""
        return {column: resolve_kind_name(name) for column, name in self.columns.items()}


def load_config(path: str | Path) -> CoercionConfig:
    """Load and validate a coercion config YAML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return CoercionConfig.model_validate(raw)


def save_config(config: CoercionConfig, path: str | Path) -> None:
    """Serialize a CoercionConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# lenient-coerce configuration\n")
        f.write("# Edit date_formats, serial_dates and the columns schema.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
