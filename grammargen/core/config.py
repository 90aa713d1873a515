"""
Configuration management for grammargen.

Provides dataclasses for all generator options with sensible defaults,
YAML file loading, environment overrides and validation.
"""

from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any
from pathlib import Path
import os

import yaml
from dotenv import find_dotenv, load_dotenv


def _env_int(name: str) -> Optional[int]:
    """Read an optional integer from the environment."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0 and 1, got {value}")


def _check_limit(name: str, value: Optional[int]) -> None:
    if value is not None and value < 1:
        raise ValueError(f"{name} must be positive or unset, got {value}")


@dataclass
class DecisionConfig:
    """Configuration for the default pseudo-random decision source."""
    seed: Optional[int] = field(default_factory=lambda: _env_int("GRAMMARGEN_SEED"))

    # Chance of the first repetition beyond the minimum
    continuation_probability: float = 0.5
    # Each further repetition is this factor less likely than the last
    repetition_decay: float = 0.5
    optional_probability: float = 0.5

    def __post_init__(self):
        _check_probability("continuation_probability", self.continuation_probability)
        _check_probability("repetition_decay", self.repetition_decay)
        _check_probability("optional_probability", self.optional_probability)
        if self.continuation_probability == 1.0 and self.repetition_decay == 1.0:
            raise ValueError("Unbounded repetitions would never stop with "
                             "continuation_probability and repetition_decay both 1")


@dataclass
class LimitsConfig:
    """Safety cutoffs. None means unbounded."""
    max_depth: Optional[int] = field(default_factory=lambda: _env_int("GRAMMARGEN_MAX_DEPTH"))
    max_output_size: Optional[int] = field(
        default_factory=lambda: _env_int("GRAMMARGEN_MAX_OUTPUT_SIZE")
    )

    def __post_init__(self):
        _check_limit("max_depth", self.max_depth)
        _check_limit("max_output_size", self.max_output_size)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file: Optional[Path] = None

    def __post_init__(self):
        if self.file and isinstance(self.file, str):
            self.file = Path(self.file)


_SECTIONS = {
    'decisions': DecisionConfig,
    'limits': LimitsConfig,
    'logging': LoggingConfig,
}


def _plain(value: Any) -> Any:
    """Make a config value YAML-safe."""
    return str(value) if isinstance(value, Path) else value


@dataclass
class GeneratorConfig:
    """
    Root configuration object containing all settings.

    Can be loaded from YAML file or constructed programmatically.
    """
    decisions: DecisionConfig = field(default_factory=DecisionConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> 'GeneratorConfig':
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            GeneratorConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeneratorConfig':
        """
        Create configuration from a dictionary of sections.

        Missing sections get their defaults; unknown sections or keys raise.

        Args:
            data: Mapping of section name to that section's settings

        Returns:
            GeneratorConfig instance

        Raises:
            ValueError: On an unknown section or key, or an invalid value
        """
        unknown = sorted(set(data) - set(_SECTIONS))
        if unknown:
            raise ValueError(f"Unknown configuration sections: {unknown}")

        sections = {}
        for name, section_type in _SECTIONS.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section '{name}' must be a mapping")
            try:
                sections[name] = section_type(**values)
            except TypeError as e:
                raise ValueError(f"Invalid '{name}' configuration: {e}") from e
        return cls(**sections)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form of the configuration, as written by save_yaml()."""
        return {
            name: {
                f.name: _plain(getattr(getattr(self, name), f.name))
                for f in fields(section_type)
            }
            for name, section_type in _SECTIONS.items()
        }

    def save_yaml(self, path: Path | str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to output YAML file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> GeneratorConfig:
    """
    Get the default configuration.

    Returns:
        GeneratorConfig with all default values
    """
    return GeneratorConfig()


def load_config(config_path: Optional[Path | str] = None) -> GeneratorConfig:
    """
    Load configuration from file or return defaults.

    A .env file in the working directory is loaded first so that
    GRAMMARGEN_* variables can supply defaults.

    Looks for config in this order:
    1. Provided path
    2. ./config/grammargen.yaml
    3. ./grammargen.yaml
    4. ~/.grammargen/config.yaml
    5. Default values

    Args:
        config_path: Optional path to config file

    Returns:
        GeneratorConfig instance
    """
    load_dotenv(find_dotenv(usecwd=True))

    if config_path:
        return GeneratorConfig.from_yaml(config_path)

    default_paths = [
        Path("config/grammargen.yaml"),
        Path("grammargen.yaml"),
        Path.home() / ".grammargen" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return GeneratorConfig.from_yaml(path)

    return get_default_config()
