"""ABOUTME: Exception hierarchy for slug generation and record storage.
ABOUTME: InvalidOption is raised by the option guard, StorageError wraps SQLite failures."""

from enum import Enum


class SluggableError(Exception):
    """Base exception for all sluggable errors."""


class InvalidOptionKind(Enum):
    """Which part of a SlugOptions value failed validation."""

    MISSING_FROM_FIELD = "missing-from-field"
    MISSING_SLUG_FIELD = "missing-slug-field"
    INVALID_MAXIMUM_LENGTH = "invalid-maximum-length"


class InvalidOption(SluggableError, ValueError):
    """Raised when slug options are missing or invalid.

    Attributes:
        kind: The validation rule that was violated.
    """

    def __init__(self, kind: InvalidOptionKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @classmethod
    def missing_from_field(cls) -> "InvalidOption":
        """No source field was configured to generate the slug from."""
        return cls(
            InvalidOptionKind.MISSING_FROM_FIELD,
            "Could not determine which fields should be sluggified",
        )

    @classmethod
    def missing_slug_field(cls) -> "InvalidOption":
        """No field was configured to save the slug to."""
        return cls(
            InvalidOptionKind.MISSING_SLUG_FIELD,
            "Could not determine in which field the slug should be saved",
        )

    @classmethod
    def invalid_maximum_length(cls) -> "InvalidOption":
        """The configured maximum length is not a positive number."""
        return cls(
            InvalidOptionKind.INVALID_MAXIMUM_LENGTH,
            "Maximum length should be greater than zero",
        )


class StorageError(SluggableError):
    """Raised when the record store cannot complete an operation."""
