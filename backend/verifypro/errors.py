"""Error taxonomy shared by services and routers.

Every error carries its HTTP semantics so a single exception handler in
``verifypro.main`` can render it.
"""

from fastapi import status


class ApplicationError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"

    def __init__(self, message: str, *, field: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApplicationError):
    """Bad user input; recoverable by correcting the named field."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NotFound(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidStateTransition(ApplicationError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state_transition"


class NotAuthenticated(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"


class NotAuthorized(ApplicationError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"


class DuplicateDocument(ApplicationError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_document"
