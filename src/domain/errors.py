from __future__ import annotations


class LedgerError(Exception):
    """Base error carrying a machine-readable code and an HTTP status."""

    status_code: int = 400
    default_code: str = "ERROR"

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code


class InputValidationError(LedgerError):
    status_code = 400
    default_code = "INVALID_REQUEST"


class ConflictError(LedgerError):
    status_code = 400
    default_code = "CONFLICT"


class AuthenticationError(LedgerError):
    status_code = 401
    default_code = "AUTH_REQUIRED"


class NotFoundError(LedgerError):
    status_code = 404
    default_code = "NOT_FOUND"


class StoreError(LedgerError):
    status_code = 500
    default_code = "SERVER_ERROR"
