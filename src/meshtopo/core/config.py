"""
Configuration management for meshtopo.

Tolerances and cleanup steps are described by pydantic models and loaded
from a single YAML file::

    tolerances:
      weld: 1.0e-6
      coplanar_angle: 0.01
    cleanup:
      simplify: true
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from meshtopo.core.exceptions import ConfigurationError


class ToleranceConfig(BaseModel):
    """Numeric tolerances shared by the analyses and editors."""

    weld: float = Field(default=1e-6, ge=0.0)
    degenerate_area: float = Field(default=1e-12, ge=0.0)
    ray_epsilon: float = Field(default=1e-9, gt=0.0)
    coplanar_angle: float = Field(default=0.01, ge=0.0, lt=90.0)  # degrees
    split_angle: float = Field(default=30.0, gt=0.0, le=180.0)  # degrees


class CleanupConfig(BaseModel):
    """Which steps the cleanup pipeline runs."""

    validate_mesh: bool = Field(default=True, alias="validate")
    weld: bool = True
    deduplicate: bool = True
    simplify: bool = False

    model_config = {"populate_by_name": True}


class EngineConfig(BaseModel):
    """Top-level configuration document."""

    tolerances: ToleranceConfig = Field(default_factory=ToleranceConfig)
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)


@dataclass
class ConfigManager:
    """
    Loads and validates an engine configuration from YAML.

    Example:
        >>> manager = ConfigManager(Path("meshtopo.yaml"))
        >>> manager.config.tolerances.weld
        1e-06
    """

    config_path: Optional[Path] = None
    _config: Optional[EngineConfig] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.config_path is None:
            return
        self.config_path = Path(self.config_path)
        if not self.config_path.is_file():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

    @classmethod
    def default(cls) -> "ConfigManager":
        """Manager that serves the built-in defaults without reading a file."""
        return cls(config_path=None)

    @property
    def config(self) -> EngineConfig:
        if self._config is None:
            self._config = self.load()
        return self._config

    @property
    def tolerances(self) -> ToleranceConfig:
        return self.config.tolerances

    @property
    def cleanup(self) -> CleanupConfig:
        return self.config.cleanup

    def load(self) -> EngineConfig:
        """
        Read and validate the configuration file.

        Returns:
            EngineConfig instance (defaults if no file was given)

        Raises:
            ConfigurationError: If the YAML is malformed or fails validation
        """
        if self.config_path is None:
            return EngineConfig()

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse configuration: {self.config_path}",
                details={"error": str(e)},
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self.config_path}",
                details={"type": type(data).__name__},
            )

        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {self.config_path}",
                details={"error": str(e)},
            ) from e
