"""Custom exceptions for the treatment-to-FDX service."""

from typing import Any


class TreatmentFDXException(Exception):
    """Base exception for the treatment-to-FDX service."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(TreatmentFDXException):
    """Raised when request input is rejected before processing."""

    pass


class NotFoundException(TreatmentFDXException):
    """Raised when a resource is not found."""

    pass


class LLMException(TreatmentFDXException):
    """Raised when LLM provider interaction fails."""

    pass


class StructuringError(TreatmentFDXException):
    """Raised when a treatment cannot be turned into a structured screenplay.

    Covers an unreachable or failing text-generation service as well as a
    reply that is not valid JSON or lacks the expected ``scenes`` shape.
    """

    pass


class EncodingError(TreatmentFDXException):
    """Raised when the FDX encoder produces a document it cannot re-read."""

    pass


class StorageException(TreatmentFDXException):
    """Raised when a generated document cannot be written to disk."""

    pass
