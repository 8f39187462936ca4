"""
Canonical hashing used across quorumvault:
- stable JSON encoding (sorted keys, compact separators)
- SHA-256 hex digests of that encoding
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json(obj: Any) -> bytes:
    """Encode a JSON-serializable object deterministically."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True).encode(
        "utf-8"
    )


def stable_json_hash(obj: Any) -> str:
    """Compute deterministic SHA-256 hash of JSON-serializable object."""
    return hashlib.sha256(canonical_json(obj)).hexdigest()
