"""
EventJournal - append-only record of a wallet's observable events.

Rules:
- Entries are appended in operation order and never rewritten
- Hash chaining detects tampering and truncation in the middle
- With a path, each entry is written as one JSONL line (fsync when sync=True)
- With a signer, every entry is signed; require_signing without one fails fast
- Subscribers (indexers, auditors) are notified after the entry is durable
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from .models import (
    JournalEntry,
    JournalEntryType,
    JournalIntegrityError,
    JournalSigner,
    JournalSigningError,
    JournalVerifier,
    now_iso,
)
from .reader import read_journal, verify_entries

if TYPE_CHECKING:
    from quorumvault.core.settings import QuorumSettings

logger = logging.getLogger(__name__)

JournalListener = Callable[[JournalEntry], None]


class EventJournal:
    def __init__(
        self,
        wallet_id: str,
        *,
        path: Optional[Union[str, Path]] = None,
        sync: bool = True,
        signer: Optional[JournalSigner] = None,
        require_signing: bool = False,
    ) -> None:
        if require_signing and signer is None:
            raise JournalSigningError(
                "Journal signing is required but no signer provided. "
                "Configure QUORUMVAULT_JOURNAL_SIGNING_KEY."
            )

        self.wallet_id = wallet_id
        self.path = Path(path) if path is not None else None
        self._sync = sync
        self._signer = signer

        self._lock = threading.Lock()
        self._entries: List[JournalEntry] = []
        self._listeners: List[JournalListener] = []
        self._seq = 0
        self._last_hash: Optional[str] = None

        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._resume_from_existing()

    @classmethod
    def from_settings(cls, settings: QuorumSettings, wallet_id: str) -> EventJournal:
        from .signing import Ed25519JournalSigner

        js = settings.journal
        signer = Ed25519JournalSigner.from_pem_file(js.signing_key) if js.signing_key else None
        return cls(
            wallet_id,
            path=js.path,
            sync=js.sync,
            signer=signer,
            require_signing=js.require_signing,
        )

    def _resume_from_existing(self) -> None:
        """Continue seq and hash chain from an existing journal file."""
        if self.path is None or not self.path.exists():
            return
        entries = read_journal(self.path)
        verify_entries(entries)
        foreign = sorted({e.wallet_id for e in entries} - {self.wallet_id})
        if foreign:
            raise JournalIntegrityError(
                f"journal {self.path} belongs to wallet(s) {', '.join(foreign)}, not {self.wallet_id!r}"
            )
        if entries:
            self._entries = entries
            self._seq = entries[-1].seq
            self._last_hash = entries[-1].entry_hash
            logger.info("Resumed journal %s at seq=%d", self.path, self._seq)

    @property
    def is_signing_enabled(self) -> bool:
        return self._signer is not None

    @property
    def signer_key_id(self) -> Optional[str]:
        return self._signer.key_id if self._signer else None

    @property
    def entries(self) -> List[JournalEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, listener: JournalListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: JournalListener) -> None:
        self._listeners.remove(listener)

    def append(self, entry_type: JournalEntryType, payload: dict) -> JournalEntry:
        with self._lock:
            entry = JournalEntry(
                seq=self._seq + 1,
                wallet_id=self.wallet_id,
                timestamp_iso=now_iso(),
                entry_type=entry_type,
                payload=payload,
                prev_hash=self._last_hash,
            )
            entry.entry_hash = entry.compute_hash()
            if self._signer is not None:
                entry.sign(self._signer)

            if self.path is not None:
                line = json.dumps(entry.to_dict(), ensure_ascii=False, sort_keys=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
                    f.flush()
                    if self._sync:
                        os.fsync(f.fileno())

            # chain advances only once the entry is written
            self._seq = entry.seq
            self._last_hash = entry.entry_hash
            self._entries.append(entry)

        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Journal listener failed on seq=%d (%s)", entry.seq, entry_type.value)
        return entry

    def verify(self, verifier: Optional[JournalVerifier] = None) -> int:
        return verify_entries(self._entries, verifier)

    def of_type(self, entry_type: JournalEntryType) -> List[JournalEntry]:
        return [e for e in self._entries if e.entry_type == entry_type]

    def for_action(self, action_id: int) -> List[JournalEntry]:
        return [e for e in self._entries if e.action_id == action_id]

    # ------------------------------------------------------------------
    # Typed event helpers
    # ------------------------------------------------------------------

    def proposed(self, action_id: int, proposer: str, target: str, value: int, digest: str) -> JournalEntry:
        return self.append(
            JournalEntryType.PROPOSED,
            {
                "action_id": action_id,
                "proposer": proposer,
                "target": target,
                "value": value,
                "digest": digest,
            },
        )

    def confirmed(self, owner: str, action_id: int) -> JournalEntry:
        return self.append(JournalEntryType.CONFIRMED, {"owner": owner, "action_id": action_id})

    def revoked(self, owner: str, action_id: int) -> JournalEntry:
        return self.append(JournalEntryType.REVOKED, {"owner": owner, "action_id": action_id})

    def executed(self, action_id: int) -> JournalEntry:
        return self.append(JournalEntryType.EXECUTED, {"action_id": action_id})

    def execution_failed(self, action_id: int, reason: str) -> JournalEntry:
        return self.append(
            JournalEntryType.EXECUTION_FAILED, {"action_id": action_id, "reason": reason}
        )

    def deposited(self, sender: str, value: int, balance: int) -> JournalEntry:
        return self.append(
            JournalEntryType.DEPOSITED, {"sender": sender, "value": value, "balance": balance}
        )
