"""
Application errors.

Every error carries the HTTP status it maps to, so the API layer can answer
with the standard envelope without inspecting the error type.
"""


class PriceTrackError(Exception):
    """Base exception for application errors."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PriceTrackError):
    """Malformed or missing input, detected before touching the store."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(PriceTrackError):
    """A requested identifier has no matching row."""

    status_code = 404
    default_message = "Resource not found"


class PersistenceError(PriceTrackError):
    """The store rejected a write or returned no generated identifier."""

    status_code = 500
    default_message = "Could not save changes"
