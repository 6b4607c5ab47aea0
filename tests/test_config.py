"""
Tests for sage_advisor/config.py.

What we test
------------
  - AppConfig() is a complete default configuration.
  - load_config() with an explicit TOML file merges its sections.
  - local.toml beside the config file overrides it.
  - SAGE_ADVISOR_* environment variables override TOML values.
  - A relative knowledge_file is anchored at the project root.
  - Missing explicit config path → FileNotFoundError.
  - Heuristic weight validation rejects weights that do not sum to 1.
  - The shipped config/default.toml validates.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sage_advisor.config import (
    AppConfig,
    EngineConfig,
    HeuristicsConfig,
    HistoryConfig,
    LoggingConfig,
    load_config,
)

_ENV_VARS = (
    "SAGE_ADVISOR_LOG_LEVEL",
    "SAGE_ADVISOR_DEBUG",
    "SAGE_ADVISOR_HISTORY_CAPACITY",
    "SAGE_ADVISOR_CONFIDENCE_THRESHOLD",
    "SAGE_ADVISOR_KNOWLEDGE_FILE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "settings.toml"
    path.write_text(content, encoding="utf-8")
    return path


# ── Defaults ──────────────────────────────────────────────────────────────────

class TestDefaults:
    def test_app_config_defaults(self):
        config = AppConfig()
        assert config.engine.max_recommendations == 5
        assert config.engine.confidence_threshold == pytest.approx(0.6)
        assert config.history.capacity == 100
        assert config.knowledge.knowledge_file is None
        assert config.heuristics.feasibility_base == pytest.approx(0.7)
        assert config.heuristics.risk_base == pytest.approx(0.3)
        assert config.heuristics.process_efficiency_threshold == pytest.approx(0.7)

    def test_shipped_default_toml(self):
        config = load_config()
        assert config.engine.max_recommendations == 5
        assert config.knowledge.knowledge_file is not None
        assert Path(config.knowledge.knowledge_file).is_absolute()
        assert Path(config.knowledge.knowledge_file).exists()


# ── load_config ───────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_explicit_file(self, tmp_path):
        path = _write_config(tmp_path, """\
[engine]
max_recommendations = 3

[history]
capacity = 7
""")
        config = load_config(path)
        assert config.engine.max_recommendations == 3
        assert config.history.capacity == 7
        assert config.engine.confidence_threshold == pytest.approx(0.6)

    def test_local_toml_overrides(self, tmp_path):
        path = _write_config(tmp_path, "[engine]\nmax_recommendations = 3\n")
        (tmp_path / "local.toml").write_text("[engine]\nmax_recommendations = 9\n")
        assert load_config(path).engine.max_recommendations == 9

    def test_project_debug_flag(self, tmp_path):
        path = _write_config(tmp_path, "[project]\ndebug = true\n")
        assert load_config(path).debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_invalid_value(self, tmp_path):
        path = _write_config(tmp_path, "[engine]\nconfidence_threshold = 2.0\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_relative_knowledge_file_anchored(self, tmp_path):
        path = _write_config(tmp_path, '[knowledge]\nknowledge_file = "config/knowledge.toml"\n')
        resolved = Path(load_config(path).knowledge.knowledge_file)
        assert resolved.is_absolute()
        assert resolved.parts[-2:] == ("config", "knowledge.toml")


class TestEnvOverrides:
    def test_overrides(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, "[logging]\nlevel = \"INFO\"\n")
        monkeypatch.setenv("SAGE_ADVISOR_LOG_LEVEL", "debug")
        monkeypatch.setenv("SAGE_ADVISOR_DEBUG", "yes")
        monkeypatch.setenv("SAGE_ADVISOR_HISTORY_CAPACITY", "12")
        monkeypatch.setenv("SAGE_ADVISOR_CONFIDENCE_THRESHOLD", "0.75")
        config = load_config(path)
        assert config.logging.level == "DEBUG"
        assert config.debug is True
        assert config.history.capacity == 12
        assert config.engine.confidence_threshold == pytest.approx(0.75)

    def test_knowledge_file_override(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, "")
        monkeypatch.setenv("SAGE_ADVISOR_KNOWLEDGE_FILE", "/srv/knowledge.toml")
        assert load_config(path).knowledge.knowledge_file == "/srv/knowledge.toml"


# ── Section validation ────────────────────────────────────────────────────────

class TestValidation:
    def test_composite_weights_must_sum(self):
        with pytest.raises(ValidationError, match="Composite score weights"):
            HeuristicsConfig(confidence_weight=0.9)

    def test_weight_tables_need_every_level(self):
        with pytest.raises(ValidationError, match="missing levels"):
            HeuristicsConfig(impact_weights={"low": 0.1})

    def test_engine_max(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_recommendations=0)

    def test_history_capacity(self):
        with pytest.raises(ValidationError):
            HistoryConfig(capacity=0)

    def test_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")
        assert LoggingConfig(level="warning").level == "WARNING"
