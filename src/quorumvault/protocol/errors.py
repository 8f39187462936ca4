from typing import Optional
from .enums import ErrorCode


class QuorumError(Exception):
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or type(self).code


class Unauthorized(QuorumError):
    """Raised when the caller is not one of the wallet owners."""

    code = ErrorCode.UNAUTHORIZED


class UnknownAction(QuorumError):
    """Raised when an action id was never proposed."""

    code = ErrorCode.UNKNOWN_ACTION


class AlreadyConfirmed(QuorumError):
    code = ErrorCode.ALREADY_CONFIRMED


class NotConfirmed(QuorumError):
    code = ErrorCode.NOT_CONFIRMED


class AlreadyExecuted(QuorumError):
    """Raised on any mutation of an action that is executed (or executing)."""

    code = ErrorCode.ALREADY_EXECUTED


class InvalidConfiguration(QuorumError):
    """Raised when owners/threshold violate the wallet invariants."""

    code = ErrorCode.INVALID_CONFIGURATION


class InvalidAction(QuorumError):
    """Raised when a proposal or deposit carries malformed fields."""

    code = ErrorCode.INVALID_ACTION
