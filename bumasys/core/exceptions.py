"""
Service-layer exception hierarchy.

Every guard and service raises one of these types. Blueprints register a
single handler against ``ServiceError`` and get consistent HTTP status codes
and machine-readable error codes everywhere.

Messages are user-facing and stable: tests and API clients assert on the
exact wording (e.g. "Organization not found", "Email already in use").

Usage:
    from bumasys.core.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Organization not found")
    raise ConflictError("Status name already exists")
"""


class ServiceError(Exception):
    """Base class for all typed service failures.

    Args:
        message: Human-readable explanation, returned verbatim to API callers.
        details: Optional field-level breakdown for structured API responses.
    """

    status_code = 400
    code = "ERR_SERVICE"

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when the entity being read or updated does not exist."""

    status_code = 404
    code = "ERR_NOT_FOUND"


class ConflictError(ServiceError):
    """Raised when a name or email would collide with an existing record."""

    status_code = 409
    code = "ERR_CONFLICT_DUPLICATE"


class InvalidReferenceError(ServiceError):
    """Raised when a foreign key is missing or belongs to the wrong parent."""

    status_code = 422
    code = "ERR_INVALID_REFERENCE"


class CircularReferenceError(ServiceError):
    """Raised for self-references and for parent chains that would loop."""

    status_code = 422
    code = "ERR_CIRCULAR_REFERENCE"


class DependencyExistsError(ServiceError):
    """Raised when a delete is blocked by live dependents."""

    status_code = 409
    code = "ERR_DEPENDENCY_EXISTS"


class OutOfRangeError(ServiceError):
    """Raised when a numeric value falls outside its allowed bounds."""

    status_code = 422
    code = "ERR_OUT_OF_RANGE"


class InvalidOrderingError(ServiceError):
    """Raised when a start date is not strictly before its end date."""

    status_code = 422
    code = "ERR_INVALID_ORDERING"


class UnauthorizedError(ServiceError):
    """Raised when the caller may not act as the requested creator."""

    status_code = 403
    code = "ERR_FORBIDDEN"


class ValidationError(ServiceError):
    """Raised for missing required fields or malformed values.

    Distinct from the relational errors above: the input itself is unusable
    (blank name, unparsable date, bad email syntax, reserved tag).
    """

    status_code = 400
    code = "ERR_VALIDATION_INVALID"


class AuthenticationError(ServiceError):
    """Raised for bad credentials and invalid or expired tokens."""

    status_code = 401
    code = "ERR_UNAUTHENTICATED"
