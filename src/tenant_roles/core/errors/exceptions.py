"""Domain exceptions for the role engine.

Every failure the engine can report is a typed subclass of AppException.
Services raise them before any write happens; the HTTP layer turns them
into RFC 7807 Problem Details responses (see handlers.py).
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================
# Generic HTTP-shaped errors
# ============================================================


class NotFoundError(AppException):
    """Raised when a requested resource is not found."""

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when input fails a domain validation rule.

    Example:
        raise ValidationError(
            "Invalid permission actions",
            errors=[{"field": "permissions", "message": "Action name is empty"}],
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class UnauthorizedError(AppException):
    """Raised when no actor was supplied by the identity layer."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class BadRequestError(AppException):
    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class ServiceUnavailableError(AppException):
    """Raised when a required resource could not be acquired in time."""

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503


# ============================================================
# Role engine errors
# ============================================================


class UnauthorizedActionError(ForbiddenError):
    """The actor's scope or privilege does not cover the target.

    Example:
        raise UnauthorizedActionError(
            "Role is at or above your privilege",
            details={"role_id": str(role.id), "actor_priority": 1},
        )
    """

    message = "You are not allowed to perform this action"
    error_code = "unauthorized"


class ReservedRoleError(ForbiddenError):
    """A reserved role (admin, user, pending, denied) would be changed."""

    message = "Reserved roles cannot be changed"
    error_code = "reserved_role"


class RoleHasUsersError(ConflictError):
    """A role still has users bound to it and cannot be deleted."""

    message = "Role still has users assigned"
    error_code = "role_has_users"

    def __init__(self, user_count: int, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        details["user_count"] = user_count
        super().__init__(
            message=kwargs.pop("message", None)
            or f"Role still has {user_count} user(s) assigned",
            details=details,
            **kwargs,
        )


class DuplicateRoleNameError(ConflictError):
    message = "A role with this name already exists"
    error_code = "duplicate_name"


class InvalidRoleNameError(ValidationError):
    message = "Invalid role name"
    error_code = "invalid_name"


class InvalidTargetError(BadRequestError):
    """A reorder points at a slot that does not exist in the provider."""

    message = "Invalid target priority"
    error_code = "invalid_target"


class LastRoleError(BadRequestError):
    message = "A user must keep at least one role"
    error_code = "last_role"


class RoleNotFoundError(NotFoundError):
    message = "Role not found"
    error_code = "role_not_found"

    def __init__(self, role_id: Any = None, **kwargs: Any) -> None:
        super().__init__(
            resource="role",
            resource_id=str(role_id) if role_id is not None else None,
            **kwargs,
        )


class UserNotFoundError(NotFoundError):
    message = "User not found"
    error_code = "user_not_found"

    def __init__(self, uid: Any = None, **kwargs: Any) -> None:
        super().__init__(
            resource="user",
            resource_id=str(uid) if uid is not None else None,
            **kwargs,
        )


class NoRoleAssignedError(AppException):
    """A user holds no role in their provider.

    This never happens in a consistent system; it signals corrupted
    state and is reported as an internal error, not a validation error.
    """

    message = "User has no role assigned"
    error_code = "no_role_assigned"
    status_code = 500
