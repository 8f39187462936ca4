"""
Journal CLI commands.

Commands:
    quorumvault verify <path> [--public-key PEM]    Verify hash chain (and signatures)
    quorumvault show <path> [--output FORMAT]       Print journal entries
    quorumvault keygen --private-out FILE           Generate an Ed25519 journal key
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

from quorumvault.journal import (
    Ed25519JournalSigner,
    Ed25519JournalVerifier,
    JournalEntry,
    JournalIntegrityError,
    read_journal,
    verify_entries,
)

logger = logging.getLogger(__name__)


def journal_verify(args) -> int:
    """Verify a journal file; exit status 0 when intact."""
    verifier = None
    if args.public_key:
        verifier = Ed25519JournalVerifier()
        for pem_path in args.public_key:
            try:
                verifier.add_public_key_pem(Path(pem_path).read_bytes())
            except (OSError, TypeError, ValueError) as e:
                print(f"Cannot load public key {pem_path}: {e}", file=sys.stderr)
                return 1

    try:
        entries = read_journal(args.path)
        count = verify_entries(entries, verifier)
    except FileNotFoundError:
        print(f"Journal not found: {args.path}", file=sys.stderr)
        return 1
    except JournalIntegrityError as e:
        print(f"Journal verification FAILED: {e}", file=sys.stderr)
        return 1

    wallets = sorted({e.wallet_id for e in entries})
    signed = "signatures verified" if verifier is not None else "signatures not checked"
    print(f"OK: {count} entries, wallet(s) {', '.join(wallets) or '-'}, {signed}")
    return 0


def journal_show(args) -> int:
    """Print journal entries as a table, JSON array or JSON lines."""
    try:
        entries = read_journal(args.path)
    except FileNotFoundError:
        print(f"Journal not found: {args.path}", file=sys.stderr)
        return 1
    except JournalIntegrityError as e:
        print(f"Unreadable journal: {e}", file=sys.stderr)
        return 1

    if args.action is not None:
        entries = [e for e in entries if e.action_id == args.action]

    output_format = getattr(args, "output", "table")
    if output_format == "json":
        print(json.dumps([e.to_dict() for e in entries], indent=2))
    elif output_format == "jsonl":
        for e in entries:
            print(json.dumps(e.to_dict()))
    else:
        _print_table(entries)
    return 0


def keygen(args) -> int:
    """Generate an Ed25519 signing key for journals."""
    private_out = Path(args.private_out)
    if private_out.exists() and not args.force:
        print(f"Refusing to overwrite {private_out} (use --force)", file=sys.stderr)
        return 1

    signer = Ed25519JournalSigner.generate()
    private_out.parent.mkdir(parents=True, exist_ok=True)
    private_out.write_bytes(signer.export_private_pem())
    os.chmod(private_out, 0o600)

    public_out = Path(args.public_out) if args.public_out else private_out.with_suffix(".pub.pem")
    public_out.write_bytes(signer.export_public_pem())

    logger.debug("Generated journal key %s", signer.key_id)
    print(f"key_id: {signer.key_id}")
    print(f"private key: {private_out}")
    print(f"public key:  {public_out}")
    return 0


def _print_table(entries: List[JournalEntry]) -> None:
    if not entries:
        print("No journal entries.")
        return

    print(f"{'SEQ':<6} {'TYPE':<24} {'ACTION':<8} {'DETAIL':<48} {'TIMESTAMP'}")
    print("-" * 110)
    for e in entries:
        action = "" if e.action_id is None else str(e.action_id)
        print(
            f"{e.seq:<6} {e.entry_type.value:<24} {action:<8} "
            f"{_detail(e.payload)[:48]:<48} {e.timestamp_iso}"
        )


def _detail(payload: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in sorted(payload.items()) if k != "action_id")
