"""
Errors of the call service. Each maps to one HTTP status and error code at the API boundary;
public messages are fixed so no store or transport detail leaks.
"""


class CallServiceError(Exception):
    status_code = 400
    error = "invalid_request"
    description = "Request rejected"
    headers: dict[str, str] | None = None

    def __init__(self, description: str | None = None):
        super().__init__(description or self.description)
        if description:
            self.description = description

    def to_detail(self) -> dict:
        return {"error": self.error, "error_description": self.description}


class NotFound(CallServiceError):
    status_code = 404
    error = "not_found"
    description = "Call not found"


class Forbidden(CallServiceError):
    status_code = 403
    error = "forbidden"
    description = "Access denied"


class InvalidStatus(CallServiceError):
    status_code = 400
    error = "invalid_status"
    description = "Status must be one of: Open, Closed"


class InvalidFormat(CallServiceError):
    status_code = 400
    error = "invalid_format"
    description = "Invalid phone number format"


class Unauthenticated(CallServiceError):
    status_code = 401
    error = "invalid_token"
    description = "Not authenticated"


class AccountExists(CallServiceError):
    status_code = 409
    error = "already_exists"
    description = "User already exists"


class InvalidCredentials(CallServiceError):
    status_code = 401
    error = "invalid_credentials"
    description = "Invalid credentials"


class AuthUnavailable(CallServiceError):
    status_code = 502
    error = "auth_unavailable"
    description = "Identity service unavailable"


class RateLimited(CallServiceError):
    """The authority throttled the end client; passed through with its Retry-After."""
    status_code = 429
    error = "rate_limited"
    description = "Too many requests"

    def __init__(self, description: str | None = None, retry_after: str | None = None):
        super().__init__(description)
        if retry_after:
            self.headers = {"Retry-After": retry_after}
