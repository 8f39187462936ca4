from .core.wallet import QuorumWallet
from .core.dispatch import CallDispatcher, LedgerDispatcher
from .journal import EventJournal, JournalEntry, JournalEntryType
from .protocol import (
    ActionSnapshot,
    AlreadyConfirmed,
    AlreadyExecuted,
    ErrorCode,
    InvalidAction,
    InvalidConfiguration,
    NotConfirmed,
    QuorumError,
    Unauthorized,
    UnknownAction,
    WalletConfig,
)

__version__ = "0.1.0"

__all__ = [
    "QuorumWallet",
    "CallDispatcher",
    "LedgerDispatcher",
    "EventJournal",
    "JournalEntry",
    "JournalEntryType",
    "ActionSnapshot",
    "WalletConfig",
    "ErrorCode",
    "QuorumError",
    "Unauthorized",
    "UnknownAction",
    "AlreadyConfirmed",
    "NotConfirmed",
    "AlreadyExecuted",
    "InvalidConfiguration",
    "InvalidAction",
]
