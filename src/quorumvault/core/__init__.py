from .dispatch import CallDispatcher, CallHandler, CallRecord, LedgerDispatcher
from .wallet import QuorumWallet

__all__ = [
    "CallDispatcher",
    "CallHandler",
    "CallRecord",
    "LedgerDispatcher",
    "QuorumWallet",
]
