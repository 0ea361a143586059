"""
Shared utilities for SCRIBE.

Common functionality used across contexts:
- Logger setup
- Configuration loading
- LLM providers
- Hashing and timestamps
"""

from scribe.utils.config import AIConfig, load_ai_config
from scribe.utils.hashing import generate_id, stable_hash
from scribe.utils.timestamp import now_iso

__all__ = ["AIConfig", "load_ai_config", "generate_id", "stable_hash", "now_iso"]
