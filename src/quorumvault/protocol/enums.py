from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHORIZED = "unauthorized"
    UNKNOWN_ACTION = "unknown_action"
    ALREADY_CONFIRMED = "already_confirmed"
    NOT_CONFIRMED = "not_confirmed"
    ALREADY_EXECUTED = "already_executed"
    INVALID_CONFIGURATION = "invalid_configuration"
    INVALID_ACTION = "invalid_action"
    INTERNAL_ERROR = "internal_error"


class ActionStatus(str, Enum):
    """Derived lifecycle status of an action, for queries and display."""

    PENDING = "pending"
    EXECUTED = "executed"
