# app/core/exceptions.py
# Domain errors raised by the service layer.
# Endpoints never build HTTPException for business rules themselves --
# app/main.py converts any DomainError via to_http_exception().

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainError(Exception):
    """Base class for every business-rule failure."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class NotFound(DomainError):
    """Referenced entity does not exist (or is not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDenied(DomainError):
    """Access policy predicate evaluated to False."""

    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(DomainError):
    """A field constraint was violated (range, enum value, required field)."""

    status_code = HTTP_422_UNPROCESSABLE


class ConflictError(DomainError):
    """Uniqueness violation, e.g. bootstrapping the same identity twice."""

    status_code = status.HTTP_409_CONFLICT


class StateError(DomainError):
    """Operation not allowed in the entity's current lifecycle state."""

    status_code = status.HTTP_409_CONFLICT
