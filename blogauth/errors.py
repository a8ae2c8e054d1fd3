"""Service error taxonomy shared by the auth core and the blog routes."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors carrying an HTTP-facing detail, code and status."""

    default_detail = "Request failed."
    default_code = "internal_error"
    default_status_code = 500

    def __init__(
        self,
        detail: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        super().__init__(self.detail)


class ValidationError(ServiceError):
    """Raised when a required field is missing or empty."""

    default_detail = "All fields required"
    default_code = "validation_error"
    default_status_code = 400


class DuplicateEmail(ServiceError):
    """Raised when signup targets an email that is already registered."""

    default_detail = "User already exists"
    default_code = "duplicate_email"
    default_status_code = 400


class InvalidCredentials(ServiceError):
    """Raised for any login failure, whether the email or the password was wrong."""

    default_detail = "Invalid email or password"
    default_code = "invalid_credentials"
    default_status_code = 401


class SessionPersistenceError(ServiceError):
    """Raised when the session backing store cannot read or record a session."""

    default_detail = "Session error"
    default_code = "session_error"
    default_status_code = 500


class Unauthenticated(ServiceError):
    """Raised by the access gate; answered with a redirect to the login page."""

    default_detail = "Authentication required."
    default_code = "unauthenticated"
    default_status_code = 303

    def __init__(self, redirect_to: str = "/") -> None:
        super().__init__()
        self.redirect_to = redirect_to


class NotFound(ServiceError):
    """Raised when a referenced resource does not exist."""

    default_detail = "Not found."
    default_code = "not_found"
    default_status_code = 404


class InternalError(ServiceError):
    """Raised when the datastore or hasher fails unexpectedly."""

    default_detail = "Server error"
    default_code = "internal_error"
    default_status_code = 500
