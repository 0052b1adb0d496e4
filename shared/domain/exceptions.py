"""
Domain Errors

Every service in the project raises one of these instead of returning
error values. The API layer turns them into HTTP responses via
``shared.interfaces.exception_handler``.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base class for all expected business errors"""

    status_code = 400
    code = "domain_error"

    def __init__(self, message: str = "", *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""
        self.details = details

    def to_dict(self) -> dict:
        data = {"detail": self.message, "code": self.code}
        if self.details is not None:
            data["details"] = self.details
        return data


class ValidationError(DomainError):
    """Input is malformed or breaks a business rule"""

    status_code = 400
    code = "validation_error"


class NotFoundError(DomainError):
    """Referenced entity does not exist or is soft-deleted"""

    status_code = 404
    code = "not_found"


class ConflictError(DomainError):
    """Request contradicts the current state (dates taken, duplicate name, wrong status)"""

    status_code = 409
    code = "conflict"


class AuthorizationError(DomainError):
    """Caller is not allowed to act on this resource"""

    status_code = 403
    code = "forbidden"


class PaymentMismatchError(DomainError):
    """Gateway amount does not match the recorded payment"""

    status_code = 409
    code = "payment_mismatch"


class UpstreamError(DomainError):
    """Payment gateway call failed"""

    status_code = 502
    code = "upstream_error"


class NotificationError(DomainError):
    """E-mail delivery failed"""

    status_code = 500
    code = "notification_error"
