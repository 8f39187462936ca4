from .enums import ActionStatus, ErrorCode
from .errors import (
    AlreadyConfirmed,
    AlreadyExecuted,
    InvalidAction,
    InvalidConfiguration,
    NotConfirmed,
    QuorumError,
    Unauthorized,
    UnknownAction,
)
from .models import (
    MAX_OWNER_COUNT,
    Action,
    ActionId,
    ActionSnapshot,
    Owner,
    WalletConfig,
    action_digest,
)

__all__ = [
    "ActionStatus",
    "ErrorCode",
    "QuorumError",
    "Unauthorized",
    "UnknownAction",
    "AlreadyConfirmed",
    "NotConfirmed",
    "AlreadyExecuted",
    "InvalidConfiguration",
    "InvalidAction",
    "MAX_OWNER_COUNT",
    "Action",
    "ActionId",
    "ActionSnapshot",
    "Owner",
    "WalletConfig",
    "action_digest",
]
