"""Stable content hashing for cache keys."""

import hashlib
import json
import uuid
from typing import Any


def canonical_json(data: Any) -> str:
    """Serialize data deterministically (sorted keys, no whitespace)."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def stable_hash(data: Any, length: int = 16) -> str:
    """
    Hash JSON-serializable data independent of dict insertion order.

    Args:
        data: Any JSON-serializable structure
        length: Number of hex characters to keep

    Returns:
        Truncated SHA-256 hex digest
    """
    return hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()[:length]


def generate_id(prefix: str) -> str:
    """Generate a unique, prefixed identifier (e.g., "experience_item_3f9a1c2b7d")."""
    return f"{prefix}_{uuid.uuid4().hex[:10]}"
