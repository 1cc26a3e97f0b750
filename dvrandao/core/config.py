"""dvrandao.core.config

Two config surfaces only:
1) `config/default.yaml`
2) Environment variables (`DVRANDAO_` prefix, `__` for nested sections)

Problem constants are Q32.32 integers. YAML and env values may be written in
decimal or 0x-prefixed hex.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from dvrandao.core.exceptions import ConfigError

DEFAULT_AREA_SIZE = 0x80000000000  # 2048.0
DEFAULT_MIN_SOLUTION_RADIUS = 0x8000


def _coerce_int(v: Any) -> Any:
    if isinstance(v, str):
        s = v.strip().replace("_", "")
        try:
            return int(s, 0)
        except ValueError:
            return v
    return v


class ProblemConfig(BaseModel):
    """Circle field constants."""

    area_size: int = DEFAULT_AREA_SIZE
    max_radius: int | None = None  # defaults to area_size / 2
    min_solution_radius: int = DEFAULT_MIN_SOLUTION_RADIUS
    enforce_bounds: bool = False  # collision-only insertion, as the verifier does

    @field_validator("area_size", "max_radius", "min_solution_radius", mode="before")
    @classmethod
    def accept_hex(cls, v: Any) -> Any:
        return _coerce_int(v)

    @field_validator("area_size")
    @classmethod
    def area_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("area_size must be > 0")
        return v

    @field_validator("min_solution_radius")
    @classmethod
    def min_radius_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("min_solution_radius must be >= 0")
        return v

    @model_validator(mode="after")
    def max_radius_within_area(self) -> ProblemConfig:
        if self.max_radius is None:
            if self.area_size >> 1 == 0:
                raise ValueError("area_size must be >= 2 when max_radius is derived from it")
            return self
        if self.max_radius <= 0:
            raise ValueError("max_radius must be > 0")
        if self.max_radius > self.area_size:
            raise ValueError(f"max_radius {self.max_radius} exceeds area_size {self.area_size}")
        return self

    @property
    def resolved_max_radius(self) -> int:
        return self.max_radius if self.max_radius is not None else self.area_size >> 1


class GenerationConfig(BaseModel):
    static_circles: int = 16
    max_iterations: int = 1000
    solution_iterations: int = 100

    @field_validator("static_circles", "max_iterations", "solution_iterations")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("generation budgets must be >= 1")
        return v


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    problem: ProblemConfig = Field(default_factory=ProblemConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "DVRANDAO_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        try:
            return cls(**raw)
        except ValueError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")
