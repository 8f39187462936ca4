from __future__ import annotations

import argparse
from typing import List, Optional

from quorumvault.core.settings import get_settings
from quorumvault.utils.logging import configure_logging

from .commands import journal_show, journal_verify, keygen


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quorumvault",
        description="Inspect and verify quorum wallet event journals.",
    )
    parser.add_argument("--log-level", default=None, help="Override QUORUMVAULT_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_verify = sub.add_parser("verify", help="Verify a journal's hash chain and signatures")
    p_verify.add_argument("path")
    p_verify.add_argument(
        "--public-key",
        action="append",
        default=None,
        help="PEM public key trusted for signatures (repeatable)",
    )
    p_verify.set_defaults(func=journal_verify)

    p_show = sub.add_parser("show", help="Print journal entries")
    p_show.add_argument("path")
    p_show.add_argument("--output", choices=("table", "json", "jsonl"), default="table")
    p_show.add_argument("--action", type=int, default=None, help="Only entries for this action id")
    p_show.set_defaults(func=journal_show)

    p_keygen = sub.add_parser("keygen", help="Generate an Ed25519 journal signing key")
    p_keygen.add_argument("--private-out", required=True)
    p_keygen.add_argument("--public-out", default=None)
    p_keygen.add_argument("--force", action="store_true")
    p_keygen.set_defaults(func=keygen)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or get_settings().runtime.log_level)
    return args.func(args)
