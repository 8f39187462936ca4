"""
Audit journal of wallet events.

The journal is:
- Append-only (optionally mirrored to a JSONL file)
- Integrity-verified (hash chaining)
- Optionally Ed25519-signed per entry
- Verifiable offline from the file alone
"""

from .models import (
    JournalEntry,
    JournalEntryType,
    JournalIntegrityError,
    JournalSigner,
    JournalSigningError,
    JournalVerifier,
)
from .reader import read_journal, verify_entries
from .signing import Ed25519JournalSigner, Ed25519JournalVerifier
from .writer import EventJournal, JournalListener

__all__ = [
    "JournalEntry",
    "JournalEntryType",
    "JournalIntegrityError",
    "JournalSigningError",
    "JournalSigner",
    "JournalVerifier",
    "JournalListener",
    "EventJournal",
    "read_journal",
    "verify_entries",
    "Ed25519JournalSigner",
    "Ed25519JournalVerifier",
]
