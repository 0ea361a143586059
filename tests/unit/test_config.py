"""Unit tests for AI configuration loading, hashing and timestamp helpers."""

import pytest

from scribe.utils.config import AIConfig, config_summary, load_ai_config
from scribe.utils.hashing import canonical_json, generate_id, stable_hash
from scribe.utils.timestamp import format_timestamp


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("LLM_PROVIDER", "LLM_MODEL", "SCRIBE_GENERATION_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
def test_defaults(clean_env):
    config = load_ai_config()
    assert config == AIConfig()
    assert config.provider == "openai"
    assert config.timeout_s == 60.0


@pytest.mark.unit
def test_environment_overrides(clean_env):
    clean_env.setenv("LLM_PROVIDER", "Anthropic")
    clean_env.setenv("SCRIBE_GENERATION_TIMEOUT_S", "12.5")
    config = load_ai_config()
    assert config.provider == "anthropic"
    assert config.timeout_s == 12.5


@pytest.mark.unit
def test_yaml_file_and_explicit_overrides(clean_env, tmp_path):
    path = tmp_path / "ai.yaml"
    path.write_text("provider: anthropic\ntarget_job_title: Data Engineer\nuser_bio: Ten years of pipelines\n")

    config = load_ai_config(path, target_job_title="Staff Engineer", model=None)
    assert config.provider == "anthropic"
    assert config.target_job_title == "Staff Engineer"
    assert config.user_bio == "Ten years of pipelines"
    assert config.model is None


@pytest.mark.unit
def test_yaml_unknown_keys(clean_env, tmp_path):
    path = tmp_path / "ai.yaml"
    path.write_text("provider: openai\ntemperature: 0.2\n")
    with pytest.raises(ValueError, match="temperature"):
        load_ai_config(path)


@pytest.mark.unit
def test_missing_config_file(clean_env, tmp_path):
    with pytest.raises(FileNotFoundError):
        load_ai_config(tmp_path / "missing.yaml")


@pytest.mark.unit
def test_config_summary_truncates_free_text():
    summary = config_summary(AIConfig(user_bio="x" * 100, target_job_info="short"))
    assert summary["user_bio"] == "x" * 40 + "..."
    assert summary["target_job_info"] == "short"


@pytest.mark.unit
def test_stable_hash_ignores_key_order():
    assert stable_hash({"a": 1, "b": [1, 2]}) == stable_hash({"b": [1, 2], "a": 1})
    assert stable_hash({"a": 1}) != stable_hash({"a": 2})
    assert len(stable_hash({"a": 1}, length=64)) == 64
    assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'


@pytest.mark.unit
def test_generate_id_prefix_and_uniqueness():
    first, second = generate_id("experience"), generate_id("experience")
    assert first.startswith("experience_")
    assert first != second


@pytest.mark.unit
def test_format_timestamp():
    assert format_timestamp("2025-11-13T18:45:40.572549") == "2025-11-13 18:45:40"
    assert format_timestamp("not a date") == "not a date"
