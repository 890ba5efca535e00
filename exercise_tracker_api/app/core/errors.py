"""
Domain errors raised by the data store and the service layer.

Each error class carries the HTTP status it maps to, so the handlers
registered in ``main.py`` can turn any of them into a plain-text
response without knowing which service raised it.
"""

from typing import Dict


class ExerciseTrackerError(Exception):
    """Base class for all expected failures of a request."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ExerciseTrackerError):
    """Malformed client input."""

    status_code = 400


class SchemaValidationError(ValidationError):
    """A document failed its collection schema.

    ``errors`` maps field names to messages in the order the fields are
    declared; the first entry is the one reported to the client.
    """

    def __init__(self, collection: str, errors: Dict[str, str]) -> None:
        self.collection = collection
        self.errors = errors
        first = next(iter(errors.values()), "Validation failed")
        super().__init__(first)


class NotFoundError(ExerciseTrackerError):
    """The requested entity does not exist."""

    status_code = 404


class DuplicateError(ExerciseTrackerError):
    """A unique field already holds the submitted value."""

    status_code = 409


class InternalError(ExerciseTrackerError):
    """Unexpected data store failure."""

    status_code = 500
