"""Configuration file support for pileup-caller."""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigurationError
from .merge import ChromosomeOrder, UnmatchedPileupPolicy
from .models import CallingConfig, CallingMode, TransitionsMode

logger = logging.getLogger(__name__)

CONFIG_SECTION = "pileup_caller"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

VALID_KEYS = {
    "mode",
    "min_depth",
    "downsample",
    "seed",
    "transitions_mode",
    "sample_pop_name",
    "chrom_order",
    "unmatched_pileup",
    "log_level",
}


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    pass


@dataclass
class CallerSettings:
    """All settings of a calling run."""

    mode: CallingMode | None = None
    min_depth: int = 1
    downsample: bool = False
    seed: int | None = None
    transitions_mode: TransitionsMode = TransitionsMode.ALL_SITES
    sample_pop_name: str = "Unknown"
    chrom_order: ChromosomeOrder = ChromosomeOrder.LEXICOGRAPHIC
    unmatched_pileup: UnmatchedPileupPolicy = UnmatchedPileupPolicy.SKIP
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CallerSettings":
        """Build settings from validated configuration values."""
        settings = cls()
        if data.get("mode") is not None:
            settings.mode = CallingMode.from_string(data["mode"])
        if "min_depth" in data:
            settings.min_depth = data["min_depth"]
        if "downsample" in data:
            settings.downsample = data["downsample"]
        if "seed" in data:
            settings.seed = data["seed"]
        if "transitions_mode" in data:
            settings.transitions_mode = TransitionsMode.from_string(data["transitions_mode"])
        if "sample_pop_name" in data:
            settings.sample_pop_name = data["sample_pop_name"]
        if "chrom_order" in data:
            settings.chrom_order = ChromosomeOrder(data["chrom_order"].lower())
        if "unmatched_pileup" in data:
            settings.unmatched_pileup = UnmatchedPileupPolicy(data["unmatched_pileup"].lower())
        if "log_level" in data:
            settings.log_level = data["log_level"].upper()
        return settings

    def to_calling_config(self) -> CallingConfig:
        """Return the immutable calling configuration.

        Raises:
            ConfigValidationError: If no calling mode is set or options conflict.
        """
        if self.mode is None:
            raise ConfigValidationError(
                "No calling mode given (--random-haploid, --random-diploid or --majority-call)"
            )
        try:
            return CallingConfig(
                mode=self.mode,
                min_depth=self.min_depth,
                downsample=self.downsample,
                seed=self.seed,
            )
        except ValueError as e:
            raise ConfigValidationError(str(e)) from None


def _check_type(config_dict: dict[str, Any], key: str, expected: type) -> None:
    value = config_dict[key]
    # bool is a subclass of int
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigValidationError(
            f"{key} must be {expected.__name__}, got {type(value).__name__}"
        )


def _check_choice(config_dict: dict[str, Any], key: str, choices: set[str]) -> None:
    _check_type(config_dict, key, str)
    value = config_dict[key].lower().replace("_", "-")
    if value not in choices:
        raise ConfigValidationError(
            f"{key} must be one of {sorted(choices)}, got '{config_dict[key]}'"
        )


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    if config_dict.get("mode") is not None:
        _check_choice(config_dict, "mode", {m.value for m in CallingMode})

    if "min_depth" in config_dict:
        _check_type(config_dict, "min_depth", int)
        if config_dict["min_depth"] < 0:
            raise ConfigValidationError(
                f"min_depth must be non-negative, got {config_dict['min_depth']}"
            )

    if "downsample" in config_dict:
        _check_type(config_dict, "downsample", bool)

    if config_dict.get("seed") is not None:
        _check_type(config_dict, "seed", int)

    if "transitions_mode" in config_dict:
        _check_choice(config_dict, "transitions_mode", {m.value for m in TransitionsMode})

    if "sample_pop_name" in config_dict:
        _check_type(config_dict, "sample_pop_name", str)
        if not config_dict["sample_pop_name"].strip():
            raise ConfigValidationError("sample_pop_name cannot be empty")

    if "chrom_order" in config_dict:
        _check_choice(config_dict, "chrom_order", {o.value for o in ChromosomeOrder})

    if "unmatched_pileup" in config_dict:
        _check_choice(config_dict, "unmatched_pileup", {p.value for p in UnmatchedPileupPolicy})

    if "log_level" in config_dict:
        _check_type(config_dict, "log_level", str)
        if config_dict["log_level"].upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{config_dict['log_level']}'"
            )


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> CallerSettings:
    """Load settings from a TOML file and apply overrides.

    Args:
        config_path: Path to the TOML configuration file, or None for defaults.
        overrides: Values that take precedence over the file (e.g. CLI options).

    Returns:
        CallerSettings with merged values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    config_dict: dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            try:
                toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigValidationError(f"Invalid TOML in {config_path}: {e}") from None

        config_dict = dict(toml_data.get(CONFIG_SECTION, {}))

        unknown = sorted(set(config_dict) - VALID_KEYS)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
            for key in unknown:
                del config_dict[key]

    if overrides:
        config_dict.update({k: v for k, v in overrides.items() if v is not None})

    validate_config(config_dict)

    return CallerSettings.from_dict(config_dict)
