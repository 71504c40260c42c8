"""
Domain errors.

Services raise these; ``mentordesk.main`` maps them to HTTP responses.
The message of a ValidationError is shown to the end user as is.
"""


class MentorDeskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MentorDeskError):
    """Bad input shape or content. Always carries a user-displayable reason."""

    status_code = 400


class NotFoundError(MentorDeskError):
    status_code = 404


class ConflictError(MentorDeskError):
    """Re-answering a Resolved question while re-answers are disabled."""

    status_code = 409


class PersistenceError(MentorDeskError):
    """A storage read or write failed."""


class NotificationError(MentorDeskError):
    """Delivery or its status write failed. Logged and recorded, never raised to callers."""
