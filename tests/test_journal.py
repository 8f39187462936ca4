"""
Tests for the event journal.

Test coverage:
1. Hash chaining and sequence numbering
2. Tamper detection (payload edit, reordering, removal)
3. Ed25519 signing and offline verification
4. JSONL file sink: write, read back, resume
5. Subscribers
6. Journal built from settings
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from quorumvault import QuorumWallet
from quorumvault.journal import (
    Ed25519JournalSigner,
    Ed25519JournalVerifier,
    EventJournal,
    JournalEntryType,
    JournalIntegrityError,
    JournalSigningError,
    read_journal,
    verify_entries,
)


# ===========================================================================
# Test fixtures
# ===========================================================================


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp(prefix="quorumvault_journal_test_")
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def signer():
    return Ed25519JournalSigner.generate()


def run_scenario(journal):
    wallet = QuorumWallet(["a", "b", "c"], 2, journal=journal)
    wallet.receive("funder", 10)
    action_id = wallet.propose("a", "payee", 10)
    wallet.confirm("b", action_id)
    return wallet


# ===========================================================================
# 1. Chaining
# ===========================================================================


class TestChaining:
    def test_sequence_and_chain(self):
        journal = EventJournal("w1")
        run_scenario(journal)
        entries = journal.entries

        assert [e.seq for e in entries] == list(range(1, len(entries) + 1))
        assert entries[0].prev_hash is None
        for prev, cur in zip(entries, entries[1:]):
            assert cur.prev_hash == prev.entry_hash
        assert journal.verify() == len(entries)

    def test_event_sequence_of_scenario(self):
        journal = EventJournal("w1")
        run_scenario(journal)
        assert [e.entry_type for e in journal.entries] == [
            JournalEntryType.DEPOSITED,
            JournalEntryType.PROPOSED,
            JournalEntryType.CONFIRMED,
            JournalEntryType.CONFIRMED,
            JournalEntryType.EXECUTED,
        ]

    def test_entries_returns_copy(self):
        journal = EventJournal("w1")
        journal.executed(0)
        journal.entries.clear()
        assert len(journal) == 1


# ===========================================================================
# 2. Tamper detection
# ===========================================================================


class TestTamperDetection:
    def test_payload_edit_detected(self):
        journal = EventJournal("w1")
        run_scenario(journal)
        entries = journal.entries
        entries[1].payload["value"] = 1_000_000
        with pytest.raises(JournalIntegrityError, match="hash mismatch"):
            verify_entries(entries)

    def test_removed_entry_detected(self):
        journal = EventJournal("w1")
        run_scenario(journal)
        entries = journal.entries
        del entries[2]
        with pytest.raises(JournalIntegrityError, match="seq"):
            verify_entries(entries)

    def test_reordered_entries_detected(self):
        journal = EventJournal("w1")
        run_scenario(journal)
        entries = journal.entries
        entries[1], entries[2] = entries[2], entries[1]
        with pytest.raises(JournalIntegrityError):
            verify_entries(entries)


# ===========================================================================
# 3. Signing
# ===========================================================================


class TestSigning:
    def test_all_entries_signed(self, signer):
        journal = EventJournal("w1", signer=signer)
        run_scenario(journal)
        assert journal.is_signing_enabled
        assert all(e.is_signed for e in journal.entries)
        assert {e.signer_key_id for e in journal.entries} == {signer.key_id}

        verifier = Ed25519JournalVerifier()
        assert verifier.add_from_signer(signer) == signer.key_id
        assert journal.verify(verifier) == len(journal)

    def test_unknown_key_fails(self, signer):
        journal = EventJournal("w1", signer=signer)
        journal.executed(0)
        verifier = Ed25519JournalVerifier()
        verifier.add_from_signer(Ed25519JournalSigner.generate())
        with pytest.raises(JournalIntegrityError, match="invalid signature"):
            journal.verify(verifier)

    def test_unsigned_entries_fail_signature_check(self):
        journal = EventJournal("w1")
        journal.executed(0)
        with pytest.raises(JournalIntegrityError, match="not signed"):
            journal.verify(Ed25519JournalVerifier())

    def test_require_signing_without_signer(self):
        with pytest.raises(JournalSigningError):
            EventJournal("w1", require_signing=True)

    def test_pem_roundtrip(self, signer, tmp_dir):
        key_path = tmp_dir / "journal.pem"
        key_path.write_bytes(signer.export_private_pem())
        loaded = Ed25519JournalSigner.from_pem_file(key_path)
        assert loaded.key_id == signer.key_id

        verifier = Ed25519JournalVerifier()
        assert verifier.add_public_key_pem(signer.export_public_pem()) == signer.key_id
        assert verifier.has_key(signer.key_id)
        assert verifier.verify(b"data", loaded.sign(b"data"), signer.key_id)


# ===========================================================================
# 4. File sink
# ===========================================================================


class TestFileSink:
    def test_written_as_jsonl(self, tmp_dir):
        path = tmp_dir / "journal" / "w1.jsonl"
        journal = EventJournal("w1", path=path, sync=False)
        run_scenario(journal)

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == len(journal)
        assert json.loads(lines[0])["entry_type"] == "wallet.deposited"

        loaded = read_journal(path)
        assert [e.to_dict() for e in loaded] == [e.to_dict() for e in journal.entries]
        assert verify_entries(loaded) == len(loaded)

    def test_resume_continues_chain(self, tmp_dir):
        path = tmp_dir / "w1.jsonl"
        first = EventJournal("w1", path=path, sync=False)
        first.executed(0)
        first.executed(1)

        resumed = EventJournal("w1", path=path, sync=False)
        assert len(resumed) == 2
        entry = resumed.executed(2)
        assert entry.seq == 3
        assert entry.prev_hash == first.entries[-1].entry_hash
        assert verify_entries(read_journal(path)) == 3

    def test_resume_refuses_corrupt_file(self, tmp_dir):
        path = tmp_dir / "w1.jsonl"
        EventJournal("w1", path=path, sync=False).executed(0)
        with open(path, "a", encoding="utf-8") as f:
            f.write("{not json\n")
        with pytest.raises(JournalIntegrityError, match="malformed"):
            EventJournal("w1", path=path, sync=False)

    def test_resume_rejects_other_wallet(self, tmp_dir):
        path = tmp_dir / "w1.jsonl"
        EventJournal("w1", path=path, sync=False).executed(0)
        with pytest.raises(JournalIntegrityError, match="belongs to"):
            EventJournal("w2", path=path, sync=False)

    def test_wallet_events_reach_signed_file(self, tmp_dir, signer):
        path = tmp_dir / "w1.jsonl"
        journal = EventJournal("w1", path=path, sync=False, signer=signer, require_signing=True)
        wallet = run_scenario(journal)
        assert wallet.journal is journal
        assert wallet.wallet_id == "w1"

        loaded = read_journal(path)
        assert [e.entry_type for e in loaded] == [
            JournalEntryType.DEPOSITED,
            JournalEntryType.PROPOSED,
            JournalEntryType.CONFIRMED,
            JournalEntryType.CONFIRMED,
            JournalEntryType.EXECUTED,
        ]
        assert all(e.signer_key_id == signer.key_id for e in loaded)

        verifier = Ed25519JournalVerifier()
        verifier.add_from_signer(signer)
        assert verify_entries(loaded, verifier) == 5

    def test_wallet_ids_continue_after_resume(self, tmp_dir):
        path = tmp_dir / "w1.jsonl"
        run_scenario(EventJournal("w1", path=path, sync=False))

        wallet = QuorumWallet(["a", "b", "c"], 2, journal=EventJournal("w1", path=path, sync=False))
        assert wallet.next_id == 1
        assert wallet.propose("a", "payee", 0) == 1
        assert len(wallet.journal.for_action(0)) == 4
        assert len(wallet.journal.for_action(1)) == 2


# ===========================================================================
# 5. Subscribers
# ===========================================================================


class TestSubscribers:
    def test_listener_receives_entries(self):
        journal = EventJournal("w1")
        seen = []
        journal.subscribe(seen.append)
        run_scenario(journal)
        assert seen == journal.entries

        journal.unsubscribe(seen.append)
        journal.executed(9)
        assert len(seen) == len(journal) - 1

    def test_failing_listener_does_not_break_wallet(self, caplog):
        journal = EventJournal("w1")

        def broken(entry):
            raise RuntimeError("indexer down")

        journal.subscribe(broken)
        wallet = run_scenario(journal)
        assert wallet.get_action(0).executed
        assert "Journal listener failed" in caplog.text


# ===========================================================================
# 6. Settings
# ===========================================================================


class TestFromSettings:
    def test_builds_signed_file_journal(self, tmp_dir, signer, monkeypatch):
        from quorumvault.core.settings import QuorumSettings

        key_path = tmp_dir / "key.pem"
        key_path.write_bytes(signer.export_private_pem())
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_PATH", str(tmp_dir / "w.jsonl"))
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_SYNC", "false")
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_SIGNING_KEY", str(key_path))
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_REQUIRE_SIGNING", "true")

        journal = EventJournal.from_settings(QuorumSettings(), "w-settings")
        assert journal.signer_key_id == signer.key_id
        assert journal.path == tmp_dir / "w.jsonl"
        journal.executed(0)
        assert (tmp_dir / "w.jsonl").exists()

    def test_wallet_writes_to_settings_journal(self, tmp_dir, signer, monkeypatch):
        from quorumvault.core.settings import QuorumSettings

        key_path = tmp_dir / "key.pem"
        key_path.write_bytes(signer.export_private_pem())
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_PATH", str(tmp_dir / "w.jsonl"))
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_SYNC", "false")
        monkeypatch.setenv("QUORUMVAULT_JOURNAL_SIGNING_KEY", str(key_path))

        run_scenario(EventJournal.from_settings(QuorumSettings(), "w-settings"))

        loaded = read_journal(tmp_dir / "w.jsonl")
        assert {e.wallet_id for e in loaded} == {"w-settings"}
        verifier = Ed25519JournalVerifier()
        verifier.add_from_signer(signer)
        assert verify_entries(loaded, verifier) == 5
