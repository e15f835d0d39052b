"""Custom exception hierarchy for pydyapi."""

from __future__ import annotations


class DyError(Exception):
    """Base exception for all pydyapi errors."""


class DyConfigError(DyError):
    """Invalid or missing configuration."""


class DyPreconditionError(DyError):
    """Identity required by an operation is not available.

    Raised before any network call when the client runs with
    :attr:`~pydyapi.config.IdentityPolicy.STRICT` and either the session
    id or the user id is missing.
    """

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class DyTransportError(DyError):
    """HTTP-level failure (network, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        operation: str = "",
    ) -> None:
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)


class DyHttpStatusError(DyTransportError):
    """The API answered with a non-2xx status.

    The response body is not decoded on this path.
    """

    def __init__(self, operation: str, status_code: int) -> None:
        super().__init__(
            f"{operation} failed: {status_code}",
            status_code=status_code,
            operation=operation,
        )
