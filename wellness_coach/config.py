"""
Typed settings for the wellness coaching toolkit.

``load_config()`` layers, lowest precedence first:

  config/default.toml   shipped defaults
  config/local.toml     per-machine overrides next to the chosen file, optional
  WELLNESS_COACH_*      environment, including anything set in ``.env``

The result is a frozen ``AppConfig``. CLI commands, store factories and the
generator take it (or one of its sections) as an argument; nothing else in
the package reads the environment.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

VALID_BACKENDS = frozenset({"memory", "sqlite", "remote"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings (``store.backend = "sqlite"``)."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/wellness_coach.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class StoreConfig(BaseModel):
    """Record store backend selection and hosted-service credentials."""

    model_config = ConfigDict(frozen=True)

    backend: str = "sqlite"
    api_url: str = "https://api.apper.io"
    project_id: Optional[str] = None
    public_key: Optional[str] = None
    timeout_seconds: float = 15.0

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_BACKENDS:
            raise ValueError(
                f"Store backend must be one of {sorted(VALID_BACKENDS)}, got '{v}'."
            )
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation generation parameters.

    ``threshold`` is exclusive: a resource must score strictly above it to be
    persisted. ``max_score`` caps scores at the high end only.
    """

    model_config = ConfigDict(frozen=True)

    default_limit: int = 10
    all_clients_limit: int = 5
    threshold: int = 15
    max_score: int = 100

    @field_validator("default_limit", "all_clients_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Recommendation limits must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_score_bounds(self) -> "RecommendationConfig":
        if self.max_score <= self.threshold:
            raise ValueError(
                f"max_score ({self.max_score}) must exceed threshold ({self.threshold})."
            )
        return self


class DataConfig(BaseModel):
    """Filesystem paths for seed data and exports."""

    model_config = ConfigDict(frozen=True)

    seed_file: str = "config/seed/mock_data.json"
    export_dir: str = "data/outputs/recommendations"


class LoggingConfig(BaseModel):
    """Log level, optional log file and line format."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/wellness_coach.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Every configuration section, validated and immutable.

    Built by ``load_config()``; ``debug`` may come from ``[project] debug``.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    store: StoreConfig = StoreConfig()
    recommendations: RecommendationConfig = RecommendationConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

# Environment variable → (section, key). A section of ``None`` is top-level.
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str]] = {
    "WELLNESS_COACH_STORE_BACKEND": ("store", "backend"),
    "WELLNESS_COACH_API_URL":       ("store", "api_url"),
    "WELLNESS_COACH_PROJECT_ID":    ("store", "project_id"),
    "WELLNESS_COACH_PUBLIC_KEY":    ("store", "public_key"),
    "WELLNESS_COACH_DB_PATH":       ("database", "db_path"),
    "WELLNESS_COACH_LOG_LEVEL":     ("logging", "level"),
    "WELLNESS_COACH_DEBUG":         (None, "debug"),
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def project_root() -> Path:
    """Return the nearest ancestor of this package holding ``pyproject.toml``.

    Falls back to the package's parent directory for non-editable installs.
    """
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build the ``AppConfig`` for this process.

    Args:
        config_path: TOML file to start from. Defaults to
            ``<project_root>/config/default.toml``. A ``local.toml`` in the
            same directory is layered on top when present.

    Returns:
        Validated, frozen ``AppConfig``.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        pydantic.ValidationError: If a merged value is rejected.
    """
    root = project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw, os.environ))


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` merged in; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Layer the ``WELLNESS_COACH_*`` variables listed in ``_ENV_OVERRIDES`` over ``raw``.

    Empty variables are ignored. ``WELLNESS_COACH_DEBUG`` accepts
    1/true/yes/on (any case) as true.
    """
    out = {k: dict(v) if isinstance(v, dict) else v for k, v in raw.items()}
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        if section is None:
            out[key] = value.strip().lower() in _TRUTHY
        else:
            out.setdefault(section, {})[key] = value
    return out


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Validate the merged tables; ``[project] debug`` is accepted as a fallback."""
    data = dict(raw)
    project = data.pop("project", {})
    data.setdefault("debug", project.get("debug", False))
    return AppConfig.model_validate(data)
