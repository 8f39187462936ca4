"""
Journal reading and offline verification.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .models import JournalEntry, JournalIntegrityError, JournalSigningError, JournalVerifier


def read_journal(path: Union[str, Path]) -> List[JournalEntry]:
    """
    Load every entry of a JSONL journal file.

    Raises JournalIntegrityError on a malformed line; a truncated tail is
    corruption, not something to skip silently.
    """
    entries: List[JournalEntry] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(JournalEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                raise JournalIntegrityError(f"{path}:{lineno}: malformed journal entry: {e}") from e
    return entries


def verify_entries(
    entries: Iterable[JournalEntry],
    verifier: Optional[JournalVerifier] = None,
) -> int:
    """
    Check sequence density, hash chain and (with a verifier) signatures.

    Returns the number of verified entries.
    """
    expected_seq = 1
    prev_hash: Optional[str] = None
    for entry in entries:
        if entry.seq != expected_seq:
            raise JournalIntegrityError(f"expected seq={expected_seq}, found seq={entry.seq}")
        if entry.prev_hash != prev_hash:
            raise JournalIntegrityError(f"seq={entry.seq}: broken hash chain")
        if entry.entry_hash != entry.compute_hash():
            raise JournalIntegrityError(f"seq={entry.seq}: entry hash mismatch")
        if verifier is not None:
            try:
                valid = entry.verify_signature(verifier)
            except JournalSigningError as e:
                raise JournalIntegrityError(str(e)) from e
            if not valid:
                raise JournalIntegrityError(
                    f"seq={entry.seq}: invalid signature for key {entry.signer_key_id}"
                )
        prev_hash = entry.entry_hash
        expected_seq += 1
    return expected_seq - 1
