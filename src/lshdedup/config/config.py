"""
Configuration management for lshdedup using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class LSHConfig(BaseModel):
    """Parameters of the shingling / MinHash / banding pipeline."""

    model_config = {"frozen": True}

    token_size: int = Field(default=3, ge=1, description="Shingle length in characters.")
    num_min_hashes: int = Field(default=100, ge=1, description="Number of MinHash permutation rounds.")
    num_bands: int = Field(default=20, ge=1, description="Number of LSH bands; must divide num_min_hashes.")
    threshold: float = Field(
        default=0.8,
        description="Similarity cutoff; pairs scoring >= threshold are duplicates. Conventionally in [0, 1].",
    )
    seed: Optional[int] = Field(default=None, description="Seed for reproducible permutations. None for entropy.")
    max_workers: int = Field(default=1, ge=1, description="Threads for rounds, bands and bucket comparisons.")

    @model_validator(mode="after")
    def check_band_split(self) -> LSHConfig:
        """Each band must cover the same number of signature rows."""
        if self.num_min_hashes % self.num_bands != 0:
            raise ValueError(
                f"num_min_hashes ({self.num_min_hashes}) must be divisible by num_bands ({self.num_bands})"
            )
        return self

    @property
    def rows_per_band(self) -> int:
        return self.num_min_hashes // self.num_bands


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to console.")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics for each run.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if logging.getLevelName(v.upper()) == f"Level {v.upper()}":
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    lsh: LSHConfig = Field(default_factory=LSHConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="LSHDEDUP_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)
