"""
Wallet data model.

Models:
- WalletConfig: owner set + threshold, validated at construction
- Action: mutable ledger record, owned by the wallet
- ActionSnapshot: frozen view of an Action handed out to callers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Set, Tuple

from quorumvault.utils.hashing import stable_json_hash

from .enums import ActionStatus
from .errors import InvalidAction, InvalidConfiguration

Owner = str
ActionId = int

MAX_OWNER_COUNT = 50


@dataclass(frozen=True)
class WalletConfig:
    """
    Owner set and confirmation threshold.

    Owners keep their construction order; that order is the canonical scan
    order for quorum evaluation.
    """

    owners: Tuple[Owner, ...]
    threshold: int

    @classmethod
    def create(
        cls, owners: Iterable[Owner], threshold: int, *, max_owners: int = MAX_OWNER_COUNT
    ) -> WalletConfig:
        config = cls(owners=tuple(owners), threshold=threshold)
        config.validate(max_owners=max_owners)
        return config

    def validate(self, *, max_owners: int = MAX_OWNER_COUNT) -> None:
        if not self.owners:
            raise InvalidConfiguration("owner set must not be empty")
        if len(self.owners) > max_owners:
            raise InvalidConfiguration(
                f"owner set has {len(self.owners)} members, limit is {max_owners}"
            )
        seen: Set[Owner] = set()
        for owner in self.owners:
            if not owner:
                raise InvalidConfiguration("owner identifiers must be non-empty")
            if owner in seen:
                raise InvalidConfiguration(f"duplicate owner: {owner!r}")
            seen.add(owner)
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int):
            raise InvalidConfiguration(f"threshold must be an integer, got {self.threshold!r}")
        if not 1 <= self.threshold <= len(self.owners):
            raise InvalidConfiguration(
                f"threshold must satisfy 1 <= threshold <= {len(self.owners)}, got {self.threshold}"
            )


def action_digest(target: str, value: int, payload: bytes) -> str:
    """Deterministic SHA-256 over the action's call parameters."""
    return stable_json_hash({"target": target, "value": value, "payload": payload.hex()})


def validate_action_fields(target: str, value: int, payload: bytes) -> None:
    if not isinstance(target, str) or not target:
        raise InvalidAction("target must be a non-empty identifier")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAction(f"value must be a non-negative integer, got {value!r}")
    if not isinstance(payload, (bytes, bytearray)):
        raise InvalidAction(f"payload must be bytes, got {type(payload).__name__}")


@dataclass
class Action:
    """Ledger record for a proposed outgoing call."""

    id: ActionId
    target: str
    value: int
    payload: bytes
    executed: bool = False
    confirmed_by: Set[Owner] = field(default_factory=set)

    @property
    def digest(self) -> str:
        return action_digest(self.target, self.value, self.payload)

    def snapshot(self, owner_order: Tuple[Owner, ...]) -> ActionSnapshot:
        return ActionSnapshot(
            id=self.id,
            target=self.target,
            value=self.value,
            payload=bytes(self.payload),
            executed=self.executed,
            confirmed_by=tuple(o for o in owner_order if o in self.confirmed_by),
            digest=self.digest,
        )


@dataclass(frozen=True)
class ActionSnapshot:
    id: ActionId
    target: str
    value: int
    payload: bytes
    executed: bool
    confirmed_by: Tuple[Owner, ...]
    digest: str

    @property
    def status(self) -> ActionStatus:
        return ActionStatus.EXECUTED if self.executed else ActionStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "target": self.target,
            "value": self.value,
            "payload": self.payload.hex(),
            "executed": self.executed,
            "confirmed_by": list(self.confirmed_by),
            "digest": self.digest,
            "status": self.status.value,
        }
