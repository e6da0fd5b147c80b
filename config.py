"""Configuration management for the abbrlink generator."""

import os
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from dotenv import load_dotenv
from filelock import FileLock
from pydantic import BaseModel, ConfigDict, Field, ValidationError

RUNTIME_FIELDS = {"root_dir", "dry_run"}


class ConfigurationError(ValueError):
    """Raised when settings are missing, malformed or out of range."""


class Encoding(str, Enum):
    """Alphabet used to render identifiers."""

    HEX = "hex"
    DECIMAL = "decimal"


class ProcessingConfig(BaseModel):
    """Processing configuration."""

    model_config = ConfigDict(validate_assignment=True)

    workers: int = Field(default=4, ge=1)
    extensions: List[str] = Field(default_factory=lambda: [".md"])
    ignore_patterns: List[str] = Field(default_factory=lambda: [".*", "node_modules"])
    fail_fast: bool = False  # Abort the whole batch on the first I/O error


class NoticeConfig(BaseModel):
    """User notice configuration."""

    model_config = ConfigDict(validate_assignment=True)

    warning_duration_ms: int = Field(default=8000, ge=0)
    progress_bar: bool = True


class Config(BaseModel):
    """Main configuration."""

    model_config = ConfigDict(validate_assignment=True)

    hash_length: int = Field(default=8, ge=4, le=32)
    encoding: Encoding = Encoding.HEX
    skip_existing: bool = True
    override_on_length_mismatch: bool = False
    use_random_mode: bool = False
    check_collisions: bool = False
    max_rounds: int = Field(default=3, ge=1, le=10)
    decimal_reduction: Literal["truncate", "leading"] = "truncate"

    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    notices: NoticeConfig = Field(default_factory=NoticeConfig)

    # Runtime parameters (set via CLI)
    root_dir: Optional[Path] = None
    dry_run: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        if not path.exists():
            return cls()

        lock = FileLock(str(path) + ".lock", timeout=30)
        try:
            with lock:
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}, got {type(data).__name__}")

        return cls.build(**data)

    @classmethod
    def build(cls, **values) -> "Config":
        """Construct a config, turning validation failures into ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    def to_yaml(self, path: Path):
        """Save configuration to YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(path) + ".lock", timeout=30)
        with lock:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    self.model_dump(mode="json", exclude=RUNTIME_FIELDS),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                )

    def with_overrides(self, **overrides) -> "Config":
        """Return a validated copy with the non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).build(**values)

    def load_env(self):
        """Load .env and apply ABBRLINK_* overrides if present."""
        load_dotenv()
        env_map = {
            "ABBRLINK_HASH_LENGTH": ("hash_length", int),
            "ABBRLINK_ENCODING": ("encoding", str),
            "ABBRLINK_MAX_ROUNDS": ("max_rounds", int),
        }
        try:
            for var, (field, cast) in env_map.items():
                value = os.getenv(var)
                if value:
                    setattr(self, field, cast(value))

            workers = os.getenv("ABBRLINK_WORKERS")
            if workers:
                self.processing.workers = int(workers)
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid environment override: {e}") from e

    @property
    def suggested_hash_length(self) -> int:
        """Longer length to suggest when collisions cannot be resolved."""
        return min(self.hash_length + 4, 32)

