"""Configuration management for the amplicon realigner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from .exceptions import ConfigurationError

# Map command-line argument names to config field names
ARG_MAPPING = {
    'input': 'input_file',
    'targets': 'targets_file',
    'output': 'output_file',
    'reference': 'reference_file',
    'min_score': 'min_score',
    'primer_similarity': 'primer_similarity',
    'gap_open': 'gap_open',
    'gap_extend': 'gap_extend',
    'padding': 'padding',
    'verbose': 'verbose',
    'log_level': 'log_level',
    'error_policy': 'error_policy',
}


def load_yaml_settings(yaml_file: Path) -> dict:
    """Read a YAML settings file into a plain dictionary."""
    yaml_file = Path(yaml_file)
    if not yaml_file.exists():
        raise ConfigurationError(f"Config file not found: {yaml_file}")

    try:
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML config: {e}", config_file=str(yaml_file))

    if not isinstance(data, dict):
        raise ConfigurationError("Expected a mapping of settings", config_file=str(yaml_file))
    return data


def normalize_settings(settings: dict) -> dict:
    """Rename option-style keys (input, min-score) to config field names."""
    normalized = {}
    for key, value in settings.items():
        key = str(key).replace('-', '_')
        normalized[ARG_MAPPING.get(key, key)] = value
    return normalized


class ErrorPolicy(Enum):
    """What to do with a recoverable per-read error (a read shorter than a primer)."""
    REJECT = "reject"  # Drop the read, log a warning, carry on
    ABORT = "abort"  # Stop the run


@dataclass(frozen=True)
class RealignerConfig:
    """Realigner configuration settings."""

    input_file: Path
    targets_file: Path
    output_file: Path
    reference_file: Path
    min_score: float = 50
    primer_similarity: float = 0.8
    gap_open: float = -14
    gap_extend: float = -4
    padding: int = 0
    verbose: bool = False
    log_level: str = "INFO"
    error_policy: ErrorPolicy = ErrorPolicy.REJECT

    def __post_init__(self):
        """Validate configuration after initialization."""
        for name in ("input_file", "targets_file", "output_file", "reference_file"):
            object.__setattr__(self, name, Path(getattr(self, name)))

        # Gap scores are penalties whatever sign they were given with
        object.__setattr__(self, "gap_open", -abs(self.gap_open))
        object.__setattr__(self, "gap_extend", -abs(self.gap_extend))

        if isinstance(self.error_policy, str):
            try:
                object.__setattr__(self, "error_policy", ErrorPolicy(self.error_policy.lower()))
            except ValueError:
                raise ConfigurationError(
                    f"Invalid error policy: {self.error_policy}", parameter="error_policy"
                ) from None

        if not self.input_file.exists():
            raise ConfigurationError(f"Input file not found: {self.input_file}")

        if not self.targets_file.exists():
            raise ConfigurationError(f"Targets file not found: {self.targets_file}")

        if not self.reference_file.exists():
            raise ConfigurationError(f"Reference file not found: {self.reference_file}")

        if not 0 <= self.primer_similarity <= 1:
            raise ConfigurationError(f"Invalid primer_similarity: {self.primer_similarity}")

        if self.padding < 0:
            raise ConfigurationError(f"Invalid padding: {self.padding}")

    @classmethod
    def from_yaml(cls, yaml_file: Path) -> "RealignerConfig":
        """Load configuration from YAML file."""
        yaml_file = Path(yaml_file)
        try:
            return cls(**normalize_settings(load_yaml_settings(yaml_file)))
        except TypeError as e:
            raise ConfigurationError(f"Invalid config parameters: {e}", config_file=str(yaml_file))

    @classmethod
    def from_args(cls, args: dict, base: dict = None) -> "RealignerConfig":
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed arguments, e.g. vars(argparse.Namespace)
            base: Optional settings (from a YAML file) that arguments override;
                keys may be option names or field names
        """
        config_args = normalize_settings(base or {})
        for arg_name, config_name in ARG_MAPPING.items():
            if arg_name in args and args[arg_name] is not None:
                config_args[config_name] = args[arg_name]

        if 'verbose' in config_args:
            config_args['verbose'] = bool(config_args['verbose'])

        try:
            return cls(**config_args)
        except TypeError as e:
            raise ConfigurationError(f"Invalid config parameters: {e}")
