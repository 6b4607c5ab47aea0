"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``SAGE_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine and CLI commands receive an ``AppConfig`` instance — never raw
dicts or individual env var lookups scattered through the codebase.
``AppConfig()`` with no arguments is a complete, valid configuration, so
library callers do not need any files on disk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sage_advisor.taxonomy.advisory_taxonomy import IMPACT_WEIGHTS, URGENCY_WEIGHTS

# ── Sub-config models ─────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Default request options and result metadata."""

    model_config = ConfigDict(frozen=True)

    max_recommendations: int = 5
    confidence_threshold: float = 0.6
    analysis_method: str = "comprehensive-advisory"
    version: str = "1.0.0"

    @field_validator("max_recommendations")
    @classmethod
    def validate_max(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_recommendations must be >= 1, got {v}.")
        return v

    @field_validator("confidence_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0.0, 1.0], got {v}.")
        return v


class HeuristicsConfig(BaseModel):
    """Every tunable constant used by generation, ranking and assessment.

    Defaults are the documented advisory constants.  None of these values were
    calibrated against outcome data; treat them as tunable, not proven.
    """

    model_config = ConfigDict(frozen=True)

    # Composite ranking score
    confidence_weight: float = 0.4
    impact_weight: float = 0.3
    urgency_weight: float = 0.2
    priority_weight: float = 0.1
    impact_weights: dict[str, float] = dict(IMPACT_WEIGHTS)
    urgency_weights: dict[str, float] = dict(URGENCY_WEIGHTS)

    # General pattern confidences
    performance_confidence: float = 0.8
    risk_mitigation_confidence: float = 0.85
    growth_confidence_high_tolerance: float = 0.75
    growth_confidence_default: float = 0.65

    # Optimization rules
    process_efficiency_threshold: float = 0.7
    default_process_efficiency: float = 0.5
    process_confidence: float = 0.75
    resource_confidence: float = 0.7

    # Decision matrix
    feasibility_base: float = 0.7
    over_budget_multiplier: float = 0.5
    timeline_mismatch_multiplier: float = 0.6
    risk_base: float = 0.3
    risk_critical_impact: float = 0.3
    risk_high_impact: float = 0.2
    risk_immediate_urgency: float = 0.2
    risk_many_risks: float = 0.2
    many_risks_threshold: int = 2

    # Risk & opportunity assessment
    low_budget_threshold: float = 10_000.0
    stakeholder_threshold: int = 10
    change_overload_threshold: int = 3

    # Aggregate confidence blend
    top_confidence_weight: float = 0.4
    mean_confidence_weight: float = 0.6

    @model_validator(mode="after")
    def validate_weight_sums(self) -> "HeuristicsConfig":
        composite = (
            self.confidence_weight + self.impact_weight
            + self.urgency_weight + self.priority_weight
        )
        if abs(composite - 1.0) > 0.01:
            raise ValueError(
                f"Composite score weights must sum to 1.0 (±0.01), got {composite:.3f}."
            )
        blend = self.top_confidence_weight + self.mean_confidence_weight
        if abs(blend - 1.0) > 0.01:
            raise ValueError(
                f"Confidence blend weights must sum to 1.0 (±0.01), got {blend:.3f}."
            )
        for name, table, keys in (
            ("impact_weights", self.impact_weights, {"low", "medium", "high", "critical"}),
            ("urgency_weights", self.urgency_weights, {"low", "medium", "high", "immediate"}),
        ):
            missing = keys - set(table)
            if missing:
                raise ValueError(f"{name} is missing levels: {sorted(missing)}.")
        return self


class HistoryConfig(BaseModel):
    """Bounded in-memory history settings."""

    model_config = ConfigDict(frozen=True)

    capacity: int = 100

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"history capacity must be >= 1, got {v}.")
        return v


class KnowledgeConfig(BaseModel):
    """Where knowledge records and data-driven rules are loaded from."""

    model_config = ConfigDict(frozen=True)

    knowledge_file: Optional[str] = None
    load_builtin_rules: bool = True


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class SamplingConfig(BaseModel):
    """Seed for demo/sample data generation.  Never used by scoring."""

    model_config = ConfigDict(frozen=True)

    seed: Optional[int] = None


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env, or directly
    as ``AppConfig()`` for built-in defaults.
    """

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    heuristics: HeuristicsConfig = HeuristicsConfig()
    history: HistoryConfig = HistoryConfig()
    knowledge: KnowledgeConfig = KnowledgeConfig()
    logging: LoggingConfig = LoggingConfig()
    sampling: SamplingConfig = SamplingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``; when that default file is
            absent, built-in defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If an explicitly specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = root / "config" / "default.toml"
        if default_path.exists():
            config_path = default_path
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                "Pass --config with an existing TOML file or omit it to use defaults."
            )

    if config_path is not None:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)

        # Also merge local.toml if present (gitignored local overrides)
        local_config_path = config_path.parent / "local.toml"
        if local_config_path.exists():
            with open(local_config_path, "rb") as f:
                local_raw: dict[str, Any] = tomllib.load(f)
            raw = _deep_merge(raw, local_raw)

        _resolve_relative_paths(raw, base=root)

    # 3. Apply SAGE_ADVISOR_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _resolve_relative_paths(raw: dict[str, Any], base: Path) -> None:
    """Anchor a relative ``knowledge.knowledge_file`` at the project root."""
    knowledge = raw.get("knowledge")
    if not isinstance(knowledge, dict):
        return
    path = knowledge.get("knowledge_file")
    if path and not Path(path).is_absolute():
        knowledge["knowledge_file"] = str(base / path)


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply SAGE_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      SAGE_ADVISOR_LOG_LEVEL             → raw["logging"]["level"]
      SAGE_ADVISOR_DEBUG                 → raw["debug"]
      SAGE_ADVISOR_HISTORY_CAPACITY      → raw["history"]["capacity"]
      SAGE_ADVISOR_CONFIDENCE_THRESHOLD  → raw["engine"]["confidence_threshold"]
      SAGE_ADVISOR_KNOWLEDGE_FILE        → raw["knowledge"]["knowledge_file"]
    """
    if log_level := os.environ.get("SAGE_ADVISOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("SAGE_ADVISOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if capacity := os.environ.get("SAGE_ADVISOR_HISTORY_CAPACITY"):
        raw.setdefault("history", {})["capacity"] = int(capacity)

    if threshold := os.environ.get("SAGE_ADVISOR_CONFIDENCE_THRESHOLD"):
        raw.setdefault("engine", {})["confidence_threshold"] = float(threshold)

    if knowledge_file := os.environ.get("SAGE_ADVISOR_KNOWLEDGE_FILE"):
        raw.setdefault("knowledge", {})["knowledge_file"] = knowledge_file

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    # Flatten top-level keys that may be nested under [project]
    project = raw.pop("project", {})

    return AppConfig(
        engine=EngineConfig(**raw.get("engine", {})),
        heuristics=HeuristicsConfig(**raw.get("heuristics", {})),
        history=HistoryConfig(**raw.get("history", {})),
        knowledge=KnowledgeConfig(**raw.get("knowledge", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        sampling=SamplingConfig(**raw.get("sampling", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
