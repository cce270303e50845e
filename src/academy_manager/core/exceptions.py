from __future__ import annotations

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``code`` so callers receive the same
    ``{message, code}`` shape regardless of where the error was raised.
    """

    code = "domain_error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class PreconditionError(ValidationError):
    """Raised when an operation is not allowed in the entity's current state."""

    code = "precondition_failed"


class NotFoundError(DomainError):
    code = "not_found"


class ConflictError(DomainError):
    """Raised when an entity with the same identity already exists."""

    code = "conflict"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class BackendUnavailableError(DomainError):
    """Raised when the store is not configured or cannot be reached."""

    code = "backend_unavailable"


class PartialBatchError(DomainError):
    """Some items of a fan-out succeeded and some failed.

    Successful items are committed and are not rolled back.
    """

    code = "partial_batch_failure"

    def __init__(self, message: str, *, succeeded: List[Any], failed: List[Dict[str, Any]]):
        super().__init__(message)
        self.succeeded = succeeded
        self.failed = failed

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["failed"] = self.failed
        return data
