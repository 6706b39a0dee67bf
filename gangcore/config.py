"""
Configuration - Tunable settings for the progression core.

Settings are resolved in three layers:
1. Model defaults (tuned for a long-lived server)
2. An optional JSON settings file
3. Environment overrides (GANGCORE_*)

Everything here is loaded once at process start and treated as
immutable; changing it requires a new process generation.
"""

from __future__ import annotations
from fractions import Fraction
import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import InvalidArgument


DEFAULT_STORE_URL = "https://smgrpdonate.shop/"

# Environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "GANGCORE_STORE_URL_OVERRIDE": ("premium_store", "override_url"),
    "GANGCORE_STORE_URL_DEFAULT": ("premium_store", "default_url"),
    "GANGCORE_STORE_PROVIDER_URL": ("premium_store", "provider_url"),
    "GANGCORE_STORE_PROVIDER_TIMEOUT": ("premium_store", "provider_timeout_seconds"),
    "GANGCORE_STARTING_PREMIUM_CREDITS": (None, "starting_premium_credits"),
    "GANGCORE_LOG_LEVEL": (None, "log_level"),
}


class CurveConfig(BaseModel):
    """
    Growth coefficients and cap thresholds for the XP curve.

    Past soft_cap_level each level costs soft_cap_multiplier times the
    base formula; past hard_cap_level, hard_cap_multiplier times.
    """
    base_xp: float = Field(2500, gt=0)
    linear_xp: float = Field(450, ge=0)
    quadratic_xp: float = Field(35, ge=0)
    soft_cap_level: int = Field(25, ge=20)
    soft_cap_multiplier: float = Field(1.35, ge=1)
    hard_cap_level: int = 50
    hard_cap_multiplier: float = Field(1.85, ge=1)

    model_config = {"frozen": True}

    @field_validator("base_xp", "linear_xp", "quadratic_xp")
    @classmethod
    def _check_coefficient_precision(cls, value: float) -> float:
        if 100 % Fraction(str(value)).denominator:
            raise ValueError("XP coefficients allow at most 2 decimal places")
        return value

    @field_validator("soft_cap_multiplier", "hard_cap_multiplier")
    @classmethod
    def _check_multiplier_precision(cls, value: float) -> float:
        if 1000 % Fraction(str(value)).denominator:
            raise ValueError("Cap multipliers allow at most 3 decimal places")
        return value

    @model_validator(mode="after")
    def _check_caps(self) -> CurveConfig:
        if self.hard_cap_level <= self.soft_cap_level:
            raise ValueError("hard_cap_level must be greater than soft_cap_level")
        if self.hard_cap_multiplier < self.soft_cap_multiplier:
            raise ValueError("hard_cap_multiplier must be >= soft_cap_multiplier")
        return self


class PremiumStoreConfig(BaseModel):
    """Where the premium credits store CTA points to."""
    override_url: Optional[str] = Field(None, description="Operator override, wins when non-blank")
    default_url: str = Field(DEFAULT_STORE_URL, min_length=1)
    provider_url: Optional[str] = Field(None, description="JSON endpoint of the credits-store provider")
    provider_timeout_seconds: float = Field(2.0, gt=0)

    model_config = {"frozen": True}


class ProgressionSettings(BaseModel):
    """Top-level settings for a progression core instance."""
    curve: CurveConfig = Field(default_factory=CurveConfig)
    premium_store: PremiumStoreConfig = Field(default_factory=PremiumStoreConfig)
    starting_premium_credits: int = Field(0, ge=0)
    log_level: str = "INFO"

    model_config = {"frozen": True}


def load_settings(
    path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> ProgressionSettings:
    """
    Load settings from defaults, an optional JSON file and the environment.

    Args:
        path: Optional JSON settings file. Missing files are an error.
        environ: Environment mapping (defaults to os.environ)

    Raises:
        InvalidArgument: The file is not valid JSON
        pydantic.ValidationError: A value is out of range
    """
    data: dict[str, Any] = {}
    if path is not None:
        settings_path = Path(path)
        try:
            data = json.loads(settings_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidArgument(f"Settings file {settings_path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidArgument(f"Settings file {settings_path} must contain a JSON object")

    env = os.environ if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        if section is None:
            data[key] = value
        else:
            data.setdefault(section, {})
            data[section][key] = value

    return ProgressionSettings.model_validate(data)
