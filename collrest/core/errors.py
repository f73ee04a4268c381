"""Exceptions raised while serving collection REST requests."""

from typing import Any


class CollectionRestError(Exception):
    """Base exception for collrest errors.

    ``status_code`` is the HTTP status the response is sent with and
    ``name`` is what the fail envelope reports in its ``data`` field.
    """

    status_code: int = 500
    name: str = "Error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def error(self) -> Any:
        """The value handed to the error formatter."""
        return self


class BadRequestError(CollectionRestError):
    """Bad request error (400)."""

    status_code = 400
    name = "Bad Request"

    def __init__(self, message: str = "400 Bad Request") -> None:
        super().__init__(message)


class UnauthorizedError(CollectionRestError):
    """Unauthorized error (401)."""

    status_code = 401
    name = "Unauthorized"

    def __init__(self, message: str = "401 Unauthorized") -> None:
        super().__init__(message)


class NotFoundError(CollectionRestError):
    """Not found error (404)."""

    status_code = 404

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class CollectionNotFoundError(NotFoundError):
    def __init__(self, collection: str) -> None:
        super().__init__(f"Could not find collection {collection}")
        self.collection = collection


class FieldNotFoundError(NotFoundError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Could not find field {field}")
        self.field = field


class DocumentNotFoundError(NotFoundError):
    def __init__(self, document_id: Any) -> None:
        super().__init__(f"Could not find document with id {document_id}")
        self.document_id = document_id


class DelegateError(CollectionRestError):
    """A failure reported by the collection layer or authentication service.

    The original error value is kept untouched so that the fail envelope
    reports the collaborator's own message and error name.
    """

    def __init__(self, error: Any, status_code: int) -> None:
        super().__init__(str(error), status_code=status_code)
        self._error = error

    @property
    def error(self) -> Any:
        return self._error


class DocumentValidationError(CollectionRestError):
    """Raised by collections when submitted document data is invalid.

    ``errors`` maps each failing field name to its message.
    """

    status_code = 400
    name = "ValidationError"

    def __init__(self, errors: dict[str, str], message: str | None = None) -> None:
        if message is None:
            message = "Validation failed: " + ", ".join(
                f"{field}: {reason}" for field, reason in errors.items()
            )
        super().__init__(message)
        self.errors = errors


__all__ = [
    "CollectionRestError",
    "BadRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "CollectionNotFoundError",
    "FieldNotFoundError",
    "DocumentNotFoundError",
    "DelegateError",
    "DocumentValidationError",
]
