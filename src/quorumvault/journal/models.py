"""
Journal data models.

Every journal entry is versioned and carries:
- a dense sequence number (starting at 1)
- hash chaining to the previous entry
- an ISO 8601 timestamp
- the observable event type and its payload

When a signer is configured, each entry also carries an Ed25519 signature
over its entry_hash together with the signer's key id.
"""

from __future__ import annotations

import base64
import binascii
import datetime as _dt
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from quorumvault.utils.hashing import stable_json_hash

JOURNAL_VERSION = "1.0"


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with Z suffix."""
    return _dt.datetime.now(tz=_dt.timezone.utc).isoformat().replace("+00:00", "Z")


class JournalSigner(Protocol):
    @property
    def key_id(self) -> str:
        """Unique identifier for the signing key."""
        ...

    def sign(self, data: bytes) -> bytes:
        """Sign data, return raw signature bytes."""
        ...


class JournalVerifier(Protocol):
    def verify(self, data: bytes, signature: bytes, key_id: str) -> bool:
        """Verify signature. Returns True if valid, False if invalid."""
        ...


class JournalEntryType(str, Enum):
    """
    Observable wallet events (stable schema names).
    """

    PROPOSED = "action.proposed"
    CONFIRMED = "action.confirmed"
    REVOKED = "action.revoked"
    EXECUTED = "action.executed"
    EXECUTION_FAILED = "action.execution_failed"
    DEPOSITED = "wallet.deposited"


class JournalIntegrityError(RuntimeError):
    """Raised when a journal's sequence, hash chain or signatures do not verify."""


class JournalSigningError(RuntimeError):
    """Raised when signing is required but not configured, or a signature is unusable."""


@dataclass
class JournalEntry:
    """
    Single journal record. Immutable once appended.
    """

    seq: int
    wallet_id: str
    timestamp_iso: str
    entry_type: JournalEntryType
    payload: Dict[str, Any]

    prev_hash: Optional[str] = None
    entry_hash: Optional[str] = None

    signature: Optional[str] = None  # base64 Ed25519 signature over entry_hash
    signer_key_id: Optional[str] = None

    version: str = JOURNAL_VERSION

    @property
    def is_signed(self) -> bool:
        return self.signature is not None and self.signer_key_id is not None

    @property
    def action_id(self) -> Optional[int]:
        return self.payload.get("action_id")

    def compute_hash(self) -> str:
        """
        Hash over seq, wallet_id, timestamp, type, payload, prev_hash and version.
        Signature fields are excluded.
        """
        return stable_json_hash(
            {
                "seq": self.seq,
                "wallet_id": self.wallet_id,
                "timestamp_iso": self.timestamp_iso,
                "entry_type": self.entry_type.value,
                "payload": self.payload,
                "prev_hash": self.prev_hash,
                "version": self.version,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "seq": self.seq,
            "wallet_id": self.wallet_id,
            "timestamp_iso": self.timestamp_iso,
            "entry_type": self.entry_type.value,
            "payload": self.payload,
            "prev_hash": self.prev_hash,
            "entry_hash": self.entry_hash,
            "version": self.version,
        }
        if self.signature is not None:
            result["signature"] = self.signature
        if self.signer_key_id is not None:
            result["signer_key_id"] = self.signer_key_id
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> JournalEntry:
        return cls(
            seq=data["seq"],
            wallet_id=data["wallet_id"],
            timestamp_iso=data["timestamp_iso"],
            entry_type=JournalEntryType(data["entry_type"]),
            payload=data["payload"],
            prev_hash=data.get("prev_hash"),
            entry_hash=data.get("entry_hash"),
            signature=data.get("signature"),
            signer_key_id=data.get("signer_key_id"),
            version=data.get("version", JOURNAL_VERSION),
        )

    def sign(self, signer: JournalSigner) -> None:
        """
        Sign entry_hash with the given signer. The hash must already be set.
        """
        if not self.entry_hash:
            raise JournalSigningError("Cannot sign entry without entry_hash. Call compute_hash() first.")
        signature_bytes = signer.sign(self.entry_hash.encode("utf-8"))
        self.signature = base64.b64encode(signature_bytes).decode("ascii")
        self.signer_key_id = signer.key_id

    def verify_signature(self, verifier: JournalVerifier) -> bool:
        if not self.is_signed:
            raise JournalSigningError(f"Entry seq={self.seq} is not signed.")
        if not self.entry_hash:
            raise JournalSigningError(f"Entry seq={self.seq} has no entry_hash.")
        try:
            signature_bytes = base64.b64decode(self.signature, validate=True)
        except (binascii.Error, ValueError) as e:
            raise JournalSigningError(f"Invalid signature encoding: {e}") from e
        return verifier.verify(self.entry_hash.encode("utf-8"), signature_bytes, self.signer_key_id)
