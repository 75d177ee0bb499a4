"""
Domain errors raised by the identity authority.
Each carries the HTTP status and error code it maps to at the API boundary;
messages are fixed strings so nothing internal reaches the caller.
"""


class AuthorityError(Exception):
    status_code = 400
    error = "invalid_request"
    description = "Request rejected"

    def __init__(self, description: str | None = None):
        super().__init__(description or self.description)
        if description:
            self.description = description

    def to_detail(self) -> dict:
        return {"error": self.error, "error_description": self.description}


class AlreadyExists(AuthorityError):
    status_code = 409
    error = "already_exists"
    description = "User already exists"


class InvalidCredentials(AuthorityError):
    """Unknown username and wrong password both end up here, with the same message."""
    status_code = 401
    error = "invalid_credentials"
    description = "Invalid credentials"


class InvalidToken(AuthorityError):
    status_code = 401
    error = "invalid_token"
    description = "Invalid token"
