"""
Runtime configuration for SCRIBE.

Values come from (lowest to highest precedence):
1. Dataclass defaults below
2. Environment variables (loaded from .env via python-dotenv)
3. An optional YAML config file (loaded with OmegaConf)
"""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

DEFAULT_TYPES_PATH = Path(__file__).resolve().parent.parent / "contexts" / "schema" / "types"
SCHEMA_TYPES_PATH = Path(os.getenv("SCRIBE_SCHEMA_TYPES_PATH", str(DEFAULT_TYPES_PATH)))
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


@dataclass
class AIConfig:
    """
    Caller-supplied configuration for AI operations.

    Attributes:
        provider: LLM provider name ("openai" or "anthropic")
        model: Model name; None selects the provider default
        target_job_title: Role the user is targeting (overrides personal details jobTitle)
        target_job_info: Free-text job description or notes
        user_bio: Free-text professional bio
        timeout_s: Upper bound for a single generation call; None waits indefinitely
    """

    provider: str = "openai"
    model: Optional[str] = None
    target_job_title: Optional[str] = None
    target_job_info: Optional[str] = None
    user_bio: Optional[str] = None
    timeout_s: Optional[float] = 60.0


def _config_from_env() -> dict:
    """Collect AIConfig overrides from environment variables."""
    overrides = {}
    if os.getenv("LLM_PROVIDER"):
        overrides["provider"] = os.getenv("LLM_PROVIDER").lower()
    if os.getenv("LLM_MODEL"):
        overrides["model"] = os.getenv("LLM_MODEL")
    if os.getenv("SCRIBE_GENERATION_TIMEOUT_S"):
        overrides["timeout_s"] = float(os.getenv("SCRIBE_GENERATION_TIMEOUT_S"))
    return overrides


def load_ai_config(config_path: Optional[Path] = None, **overrides) -> AIConfig:
    """
    Build an AIConfig from defaults, environment, an optional YAML file and keyword overrides.

    Args:
        config_path: Optional YAML file with AIConfig keys
        **overrides: Explicit values that win over everything else

    Returns:
        AIConfig instance

    Raises:
        FileNotFoundError: If config_path is given but does not exist
        ValueError: If the YAML file contains keys AIConfig does not define
    """
    merged = OmegaConf.merge(OmegaConf.structured(AIConfig), _config_from_env())

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"AI config not found: {config_path}")
        file_config = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True) or {}
        known = {f.name for f in fields(AIConfig)}
        unknown = set(file_config) - known
        if unknown:
            raise ValueError(
                f"Unknown AI config keys in {config_path}: {', '.join(sorted(unknown))}"
            )
        merged = OmegaConf.merge(merged, file_config)

    explicit = {key: value for key, value in overrides.items() if value is not None}
    merged = OmegaConf.merge(merged, explicit)
    return AIConfig(**OmegaConf.to_container(merged, resolve=True))


def config_summary(config: AIConfig) -> dict:
    """Config as a dict with free-text fields truncated, for provenance logging."""
    summary = asdict(config)
    for key in ("target_job_info", "user_bio"):
        if summary[key] and len(summary[key]) > 40:
            summary[key] = summary[key][:40] + "..."
    return summary
