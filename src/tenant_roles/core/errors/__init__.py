"""Error handling module with RFC 7807 Problem Details."""

from tenant_roles.core.errors.exceptions import (
    AppException,
    BadRequestError,
    ConflictError,
    DuplicateRoleNameError,
    ForbiddenError,
    InvalidRoleNameError,
    InvalidTargetError,
    LastRoleError,
    NoRoleAssignedError,
    NotFoundError,
    ReservedRoleError,
    RoleHasUsersError,
    RoleNotFoundError,
    ServiceUnavailableError,
    UnauthorizedActionError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from tenant_roles.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AppException",
    "BadRequestError",
    "ConflictError",
    "DuplicateRoleNameError",
    "FieldError",
    "ForbiddenError",
    "InvalidRoleNameError",
    "InvalidTargetError",
    "LastRoleError",
    "NoRoleAssignedError",
    "NotFoundError",
    "ProblemDetail",
    "ReservedRoleError",
    "RoleHasUsersError",
    "RoleNotFoundError",
    "ServiceUnavailableError",
    "UnauthorizedActionError",
    "UnauthorizedError",
    "UserNotFoundError",
    "ValidationError",
    "register_exception_handlers",
]
