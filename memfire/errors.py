"""Exception hierarchy for memfire.

모든 예외는 MemFireError를 상속합니다.
"""


class MemFireError(Exception):
    """Base error for the project."""


class PathError(MemFireError, ValueError):
    """Malformed path or wrong segment parity for the addressed kind."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{message} (path={path!r})" if path is not None else message)


class ValidationError(MemFireError, ValueError):
    """Invalid write payload."""


class InvalidQueryError(MemFireError, ValueError):
    """Query built with an unknown operator or unusable operand."""


class PlatformError(MemFireError):
    """Contract violation reported the way the backend platform reports it."""

    code: str = "failed-precondition"


class TransactionOrderingError(PlatformError):
    """A read was issued after a write in the same transaction."""


class TransactionStateError(PlatformError):
    """Operation issued on a transaction that already finished."""


class InvalidTransactionResultError(PlatformError, ValidationError):
    """Transaction result holds a value kind that cannot be returned."""

    code = "invalid-argument"


class TransactionResultTypeError(MemFireError, TypeError):
    """Transaction callback returned something other than a mapping or None."""


class TransactionCallbackError(MemFireError):
    """The transaction callback raised; the original error is ``__cause__``."""
