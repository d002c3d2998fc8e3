"""Configuration management for prmap."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from prmap.exceptions import ConfigError

PRMAP_DIR = ".prmap"
CONFIG_FILE = "config.json"
DEFAULT_OUTPUT = "prmap.html"
REMOTE_PLACEHOLDERS = ("owner", "repo")


class SyncConfig(BaseModel):
    """Branch synchronization configuration."""

    enabled: bool = True
    remote_template: str = "git@github.com:{owner}/{repo}"
    fetch_timeout: float | None = 300.0

    @field_validator("remote_template")
    @classmethod
    def check_placeholders(cls, value: str) -> str:
        missing = [p for p in REMOTE_PLACEHOLDERS if "{" + p + "}" not in value]
        if missing:
            raise ValueError(
                "remote_template must contain " + " and ".join("{" + p + "}" for p in missing)
            )
        try:
            value.format(owner="owner", repo="repo")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"remote_template is not a valid format string: {e}") from e
        return value


class DiffConfig(BaseModel):
    """Diff aggregation configuration."""

    ignore_files: list[str] = Field(
        default_factory=lambda: [
            "Cargo.lock",
            "package-lock.json",
            "yarn.lock",
            "pnpm-lock.yaml",
            "poetry.lock",
            "Pipfile.lock",
            "uv.lock",
            "composer.lock",
            "Gemfile.lock",
            "go.sum",
        ]
    )
    context_lines: int = Field(default=3, ge=0)
    git_timeout: float | None = 60.0


class ReportConfig(BaseModel):
    """Report output configuration."""

    output: str = DEFAULT_OUTPUT
    title: str = "Pull request map"
    heading: str = "Files touched by open pull requests"


class ProjectConfig(BaseModel):
    """Full project configuration."""

    max_pull_requests: int = Field(default=100, ge=1)
    keep_going: bool = False
    sync: SyncConfig = Field(default_factory=SyncConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def get_prmap_dir(root: Path) -> Path:
    """Get the .prmap directory for a repository root."""
    return root / PRMAP_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .prmap/config.json, falling back to defaults."""
    config_path = get_prmap_dir(root) / CONFIG_FILE
    if not config_path.exists():
        return ProjectConfig()
    try:
        data = json.loads(config_path.read_text())
        return ProjectConfig(**data)
    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .prmap/config.json."""
    prmap_dir = get_prmap_dir(root)
    prmap_dir.mkdir(parents=True, exist_ok=True)
    config_path = prmap_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'sync.fetch_timeout')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return ProjectConfig(**data)
    except ValidationError as e:
        reason = e.errors()[0]["msg"]
        raise ConfigError(f"Invalid value for {key}: {value!r} ({reason})") from e
