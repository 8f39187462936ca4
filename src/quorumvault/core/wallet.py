"""
QuorumWallet - multi-owner authorization state machine.

A fixed owner set jointly controls the wallet's outgoing calls. Any owner
proposes an action (and thereby confirms it); once `threshold` distinct owners
have confirmed, the action is executed exactly once through the injected
CallDispatcher.

Execution ordering (reentrancy guard):

    executed = True, balance debited
    -> dispatcher.call(target, value, payload)      # may re-enter the wallet
    -> success: Executed (terminal)
    -> failure: refund, ExecutionFailed, executed = False (retryable)

Every public operation checks all of its preconditions before changing any
state, so a rejected call leaves nothing behind.

A journal file belongs to one wallet. When the wallet is given a journal that
already holds entries, action ids continue after the highest recorded id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from quorumvault.journal import EventJournal, JournalEntry
from quorumvault.protocol.errors import (
    AlreadyConfirmed,
    AlreadyExecuted,
    InvalidAction,
    NotConfirmed,
    Unauthorized,
    UnknownAction,
)
from quorumvault.protocol.models import (
    Action,
    ActionId,
    ActionSnapshot,
    Owner,
    WalletConfig,
    validate_action_fields,
)

from .dispatch import CallDispatcher, LedgerDispatcher
from .settings import get_settings

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


class QuorumWallet:
    def __init__(
        self,
        owners: Iterable[Owner],
        threshold: int,
        *,
        dispatcher: Optional[CallDispatcher] = None,
        journal: Optional[EventJournal] = None,
        wallet_id: Optional[str] = None,
        max_owners: Optional[int] = None,
    ) -> None:
        if max_owners is None:
            max_owners = get_settings().wallet.max_owners
        self._config = WalletConfig.create(owners, threshold, max_owners=max_owners)
        self._owner_set = frozenset(self._config.owners)

        if journal is not None and wallet_id is not None and journal.wallet_id != wallet_id:
            raise ValueError(
                f"journal belongs to wallet {journal.wallet_id!r}, not {wallet_id!r}"
            )
        if wallet_id is None:
            wallet_id = journal.wallet_id if journal is not None else str(uuid.uuid4())
        self._wallet_id = wallet_id
        self._journal = journal if journal is not None else EventJournal(wallet_id)
        self._dispatcher: CallDispatcher = dispatcher if dispatcher is not None else LedgerDispatcher()

        self._actions: Dict[ActionId, Action] = {}
        self._next_id: ActionId = self._first_free_id(self._journal)
        self._balance = 0

        logger.info(
            "Wallet %s created: %d-of-%d",
            self._wallet_id,
            self._config.threshold,
            len(self._config.owners),
        )

    # ------------------------------------------------------------------
    # Configuration / state queries
    # ------------------------------------------------------------------

    @property
    def wallet_id(self) -> str:
        return self._wallet_id

    @property
    def owners(self) -> Tuple[Owner, ...]:
        return self._config.owners

    @property
    def threshold(self) -> int:
        return self._config.threshold

    @property
    def config(self) -> WalletConfig:
        return self._config

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def next_id(self) -> ActionId:
        return self._next_id

    @property
    def dispatcher(self) -> CallDispatcher:
        return self._dispatcher

    @property
    def journal(self) -> EventJournal:
        return self._journal

    @property
    def events(self) -> List[JournalEntry]:
        return self._journal.entries

    def is_owner(self, identity: Owner) -> bool:
        return identity in self._owner_set

    def get_action(self, action_id: ActionId) -> ActionSnapshot:
        return self._require_action(action_id).snapshot(self._config.owners)

    def confirmation_count(self, action_id: ActionId) -> int:
        return len(self._require_action(action_id).confirmed_by)

    def confirmations(self, action_id: ActionId) -> List[Owner]:
        """Owners that confirmed the action, in canonical owner order."""
        confirmed = self._require_action(action_id).confirmed_by
        return [o for o in self._config.owners if o in confirmed]

    def action_count(self, *, pending: bool = True, executed: bool = True) -> int:
        return sum(1 for a in self._actions.values() if self._selected(a, pending, executed))

    def action_ids(
        self,
        start: int = 0,
        end: Optional[int] = None,
        *,
        pending: bool = True,
        executed: bool = True,
    ) -> List[ActionId]:
        """
        Ids matching the status filter, sliced [start:end) over the filtered list.
        """
        matching = [a.id for a in self._actions.values() if self._selected(a, pending, executed)]
        return matching[start:end]

    @staticmethod
    def _selected(action: Action, pending: bool, executed: bool) -> bool:
        return (pending and not action.executed) or (executed and action.executed)

    # ------------------------------------------------------------------
    # Quorum
    # ------------------------------------------------------------------

    def is_confirmed(self, action_id: ActionId) -> bool:
        confirmed = self._require_action(action_id).confirmed_by
        count = 0
        for owner in self._config.owners:
            if owner in confirmed:
                count += 1
            if count == self._config.threshold:
                return True
        return False

    # ------------------------------------------------------------------
    # Inbound operations
    # ------------------------------------------------------------------

    def receive(self, sender: str, value: int) -> None:
        """Accept value from anyone. No action state changes."""
        self._check_amount(value)
        self._credit(sender, value)

    def propose(
        self,
        caller: Owner,
        target: str,
        value: int,
        payload: bytes = b"",
        *,
        attached: int = 0,
    ) -> ActionId:
        self._require_owner(caller)
        validate_action_fields(target, value, payload)
        self._check_amount(attached)

        self._credit(caller, attached)
        action = Action(
            id=self._next_id,
            target=target,
            value=value,
            payload=bytes(payload),
            confirmed_by={caller},
        )
        logger.info(
            "Action %d proposed by %s: target=%s value=%d", action.id, caller, target, value
        )
        self._journal.proposed(action.id, caller, target, value, action.digest)
        self._journal.confirmed(caller, action.id)
        self._actions[action.id] = action
        self._next_id += 1
        self._try_execute(action)
        return action.id

    def confirm(self, caller: Owner, action_id: ActionId, *, attached: int = 0) -> None:
        self._require_owner(caller)
        action = self._require_action(action_id)
        self._require_not_executed(action)
        if caller in action.confirmed_by:
            raise AlreadyConfirmed(f"{caller!r} already confirmed action {action_id}")
        self._check_amount(attached)

        self._credit(caller, attached)
        action.confirmed_by.add(caller)
        logger.debug("Action %d confirmed by %s", action_id, caller)
        self._journal.confirmed(caller, action_id)
        self._try_execute(action)

    def revoke(self, caller: Owner, action_id: ActionId, *, attached: int = 0) -> None:
        action = self._require_action(action_id)
        self._require_not_executed(action)
        self._require_owner(caller)
        if caller not in action.confirmed_by:
            raise NotConfirmed(f"{caller!r} has not confirmed action {action_id}")
        self._check_amount(attached)

        self._credit(caller, attached)
        action.confirmed_by.discard(caller)
        logger.debug("Action %d revoked by %s", action_id, caller)
        self._journal.revoked(caller, action_id)

    def execute(
        self, action_id: ActionId, *, caller: Optional[str] = None, attached: int = 0
    ) -> bool:
        """
        Attempt execution. Open to any caller; quorum is the only gate.

        Returns True if the action executed during this call. Below quorum
        this is a no-op.
        """
        action = self._require_action(action_id)
        self._require_not_executed(action)
        self._check_amount(attached)

        self._credit(caller or ANONYMOUS, attached)
        return self._try_execute(action)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _try_execute(self, action: Action) -> bool:
        if not self.is_confirmed(action.id):
            return False

        action.executed = True

        if action.value > self._balance:
            reason = f"insufficient balance: need {action.value}, have {self._balance}"
            return self._fail(action, reason)

        self._balance -= action.value
        try:
            success = bool(self._dispatcher.call(action.target, action.value, action.payload))
            reason = "" if success else "call reported failure"
        except Exception as exc:
            logger.warning(
                "Action %d: call to %s raised", action.id, action.target, exc_info=True
            )
            success = False
            reason = f"call raised {type(exc).__name__}: {exc}"

        if success:
            logger.info("Action %d executed: target=%s value=%d", action.id, action.target, action.value)
            self._journal.executed(action.id)
            return True

        self._balance += action.value
        return self._fail(action, reason)

    def _fail(self, action: Action, reason: str) -> bool:
        logger.warning("Action %d execution failed: %s", action.id, reason)
        action.executed = False
        self._journal.execution_failed(action.id, reason)
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _first_free_id(journal: EventJournal) -> ActionId:
        recorded = [e.action_id for e in journal.entries if e.action_id is not None]
        return max(recorded) + 1 if recorded else 0

    def _credit(self, sender: str, value: int) -> None:
        if value > 0:
            self._balance += value
            self._journal.deposited(sender, value, self._balance)

    @staticmethod
    def _check_amount(value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidAction(f"amount must be a non-negative integer, got {value!r}")

    def _require_owner(self, caller: Owner) -> None:
        if caller not in self._owner_set:
            raise Unauthorized(f"{caller!r} is not an owner")

    def _require_action(self, action_id: ActionId) -> Action:
        action = self._actions.get(action_id)
        if action is None:
            raise UnknownAction(f"no action with id {action_id!r}")
        return action

    @staticmethod
    def _require_not_executed(action: Action) -> None:
        if action.executed:
            raise AlreadyExecuted(f"action {action.id} already executed")
