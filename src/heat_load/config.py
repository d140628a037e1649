# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Engine settings model and YAML loader."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from heat_load.analysis.thresholds import (
    BALANCE_POINT_STEP,
    COMPARISON_SET_POINT,
    MAX_BALANCE_POINT,
    MAX_OUTLIER_ITERATIONS,
    MIN_BALANCE_POINT,
    MIN_PERIOD_LENGTH_DAYS,
    OUTLIER_Z_THRESHOLD,
)
from heat_load.errors import ConfigError


class EngineSettings(BaseModel):
    """Tunable parameters of the analytics engine.

    Defaults match the policy constants in
    :mod:`heat_load.analysis.thresholds`.
    """

    model_config = {"frozen": True}

    min_balance_point: float = Field(default=MIN_BALANCE_POINT)
    max_balance_point: float = Field(default=MAX_BALANCE_POINT)
    balance_point_step: float = Field(default=BALANCE_POINT_STEP, gt=0)
    outlier_threshold: float = Field(default=OUTLIER_Z_THRESHOLD, gt=0)
    max_iterations: int = Field(default=MAX_OUTLIER_ITERATIONS, ge=1)
    min_period_length_days: int = Field(default=MIN_PERIOD_LENGTH_DAYS, ge=1)
    comparison_set_point: float = Field(default=COMPARISON_SET_POINT)

    @model_validator(mode="after")
    def _check_range(self) -> EngineSettings:
        if self.max_balance_point < self.min_balance_point:
            raise ValueError(
                "max_balance_point must not be below min_balance_point"
            )
        return self


def load_settings(path: str | Path) -> EngineSettings:
    """Load :class:`EngineSettings` from a YAML file.

    An empty file yields the defaults.  Missing files, unparsable YAML and
    invalid values all raise :class:`ConfigError`.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Settings file not found: {config_path}")

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping of settings")

    try:
        return EngineSettings.model_validate(raw)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid settings in {config_path}: {exc}") from exc
