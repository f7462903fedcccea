"""Exception taxonomy for the permissions platform."""

from fastapi import HTTPException, status


class PermissionsPlatformError(Exception):
    """Base exception for the permissions platform."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ResourceNotFoundError(PermissionsPlatformError):
    """Raised when a requested row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ResourceConflictError(PermissionsPlatformError):
    """Raised when a write would violate a unique constraint."""

    status_code = status.HTTP_409_CONFLICT


class DependencyInUseError(PermissionsPlatformError):
    """Raised when a delete is attempted while dependent rows still exist."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, dependents: dict[str, int] | None = None):
        self.dependents = dependents or {}
        super().__init__(message)


class ValidationError(PermissionsPlatformError):
    """Raised when input validation fails."""
    pass


class AuthorizationError(PermissionsPlatformError):
    """Raised when a caller lacks permission. Carries no detail about which check failed."""

    status_code = status.HTTP_403_FORBIDDEN


class EvaluationFailure(PermissionsPlatformError):
    """Infrastructure failure during a permission lookup.

    Never escapes the evaluator: it is logged and turned into a deny.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
