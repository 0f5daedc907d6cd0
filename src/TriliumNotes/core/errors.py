"""Exception types shared by the query compiler, services and tool layer."""

from __future__ import annotations


class ValidationError(ValueError):
    """Rejected input that must abort the current request.

    Attributes:
        property_name: Name of the offending property or argument.
        value: The offending value, if any.
    """

    def __init__(self, message: str, *, property_name: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.property_name = property_name
        self.value = value


class PermissionDeniedError(PermissionError):
    """The configured access permissions do not allow the operation."""


class EtapiError(RuntimeError):
    """Non-successful response from the note-storage REST API.

    Attributes:
        status_code: HTTP status code, or None for transport failures.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoteNotFoundError(EtapiError):
    """The requested note or attribute does not exist."""
