from .hashing import canonical_json, stable_json_hash
from .logging import configure_logging

__all__ = [
    "canonical_json",
    "stable_json_hash",
    "configure_logging",
]
