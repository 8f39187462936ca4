"""
Outbound call dispatch.

The wallet performs exactly one kind of external side effect: send `value`
with `payload` to `target` and learn whether it succeeded. Dispatchers are
untrusted and may call back into the wallet before returning.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)

# handler(value, payload) -> success
CallHandler = Callable[[int, bytes], bool]


class CallDispatcher(Protocol):
    def call(self, target: str, value: int, payload: bytes) -> bool:
        """Deliver value + payload to target; True on success."""
        ...


@dataclass(frozen=True)
class CallRecord:
    target: str
    value: int
    payload: bytes
    success: bool


class LedgerDispatcher:
    """
    In-memory dispatcher crediting value to targets.

    Targets without a handler accept every call. A registered handler plays
    the part of a contract at that target: it runs before the value is
    credited and its return value decides success. Handlers may re-enter the
    wallet.
    """

    def __init__(self) -> None:
        self.balances: Dict[str, int] = defaultdict(int)
        self.calls: List[CallRecord] = []
        self._handlers: Dict[str, CallHandler] = {}

    def register(self, target: str, handler: CallHandler) -> None:
        self._handlers[target] = handler

    def unregister(self, target: str) -> None:
        self._handlers.pop(target, None)

    def call(self, target: str, value: int, payload: bytes) -> bool:
        handler = self._handlers.get(target)
        success = True if handler is None else bool(handler(value, payload))
        if success:
            self.balances[target] += value
        self.calls.append(CallRecord(target=target, value=value, payload=bytes(payload), success=success))
        logger.debug("call target=%s value=%d success=%s", target, value, success)
        return success

    def balance_of(self, target: str) -> int:
        return self.balances.get(target, 0)
