"""
Exception hierarchy for the profile assistant.

Every error the package raises on purpose derives from ProfileRagError, so the
CLI and the dashboard can turn it into a user-visible message.
"""

from typing import Any


class ProfileRagError(Exception):
    """Base exception for all profile assistant errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputValidationError(ProfileRagError):
    """Raised when caller input is blank or out of range."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigurationError(ProfileRagError):
    """Raised when settings name an unknown backend or miss credentials."""


class KnowledgeBaseError(ProfileRagError):
    """Raised when the knowledge-base JSON cannot be read or parsed."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["path"] = path
        super().__init__(message, details)


class IndexIngestionError(ProfileRagError):
    """Raised when the index provider rejects an upsert."""


class IndexInitializationError(ProfileRagError):
    """Raised by the assistant when the one-time index seeding fails."""
