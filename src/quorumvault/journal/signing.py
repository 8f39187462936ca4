"""
Ed25519 signing for journal entries.

Key ids are the first 16 hex characters of the SHA-256 of the raw public key.
Verification is offline: verifiers hold pre-loaded public keys only.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Dict, List, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

PathLike = Union[str, Path]


def key_id_for(public_key: Ed25519PublicKey) -> str:
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
    )
    return hashlib.sha256(raw).hexdigest()[:16]


class Ed25519JournalSigner:
    """
    Implements JournalSigner.

        signer = Ed25519JournalSigner.from_pem_file("/etc/quorumvault/journal.pem")
        signer = Ed25519JournalSigner.generate()  # tests only
    """

    def __init__(self, private_key: Ed25519PrivateKey):
        self._private_key = private_key
        self._public_key = private_key.public_key()
        self._key_id = key_id_for(self._public_key)

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def public_key_bytes(self) -> bytes:
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
        )

    def sign(self, data: bytes) -> bytes:
        return self._private_key.sign(data)

    @classmethod
    def generate(cls) -> Ed25519JournalSigner:
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_pem_file(cls, path: PathLike, password: Optional[bytes] = None) -> Ed25519JournalSigner:
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=password)
        if not isinstance(private_key, Ed25519PrivateKey):
            raise TypeError(f"Expected Ed25519 private key, got {type(private_key)}")
        return cls(private_key)

    def export_private_pem(self) -> bytes:
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def export_public_pem(self) -> bytes:
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )


class Ed25519JournalVerifier:
    """
    Implements JournalVerifier against a set of registered public keys.
    """

    def __init__(self) -> None:
        self._public_keys: Dict[str, Ed25519PublicKey] = {}

    def add_public_key(self, public_key_bytes: bytes) -> str:
        """Register a raw 32-byte public key; returns its key id."""
        public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
        key_id = key_id_for(public_key)
        self._public_keys[key_id] = public_key
        return key_id

    def add_public_key_pem(self, pem_data: bytes) -> str:
        public_key = serialization.load_pem_public_key(pem_data)
        if not isinstance(public_key, Ed25519PublicKey):
            raise TypeError(f"Expected Ed25519 public key, got {type(public_key)}")
        key_id = key_id_for(public_key)
        self._public_keys[key_id] = public_key
        return key_id

    def add_from_signer(self, signer: Ed25519JournalSigner) -> str:
        return self.add_public_key(signer.public_key_bytes)

    def verify(self, data: bytes, signature: bytes, key_id: str) -> bool:
        public_key = self._public_keys.get(key_id)
        if public_key is None:
            return False
        try:
            public_key.verify(signature, data)
            return True
        except InvalidSignature:
            return False

    def has_key(self, key_id: str) -> bool:
        return key_id in self._public_keys

    @property
    def key_ids(self) -> List[str]:
        return list(self._public_keys.keys())
