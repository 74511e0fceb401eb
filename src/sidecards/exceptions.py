"""Centralized exception hierarchy for sidecards.

All custom exceptions inherit from SideCardsError, so callers can catch
every store, storage and reconciliation failure with a single except clause.

Exception Hierarchy:
    SideCardsError (base)
     ConfigurationError - Configuration loading/validation errors
     ValidationError - Invalid ids or update fields
     NotFoundError - Operation referenced an id absent from the store
     ParseError - Persisted record could not be decoded
     StorageError - Underlying document/record I/O failed
     AllocationError - Identifier allocation gave up after repeated collisions

    ConflictWarning (UserWarning) - identifier collision during allocation;
    raised and handled inside the allocator only.

Usage Examples:
    try:
        store.update(record_id, text="New prompt")
    except NotFoundError as e:
        logger.warning("update_rejected", **e.to_dict())

    raise StorageError(
        "Cannot write document",
        error_code=ErrorCode.STO_WRITE_FAILED.value,
        context={"path": "notes/a.md"},
    )
"""

from typing import Any

from .error_codes import ErrorCode


class SideCardsError(Exception):
    """Base exception for all sidecards errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        error_code: Structured error code for machine-readable handling
        context: Additional context for debugging (paths, record ids)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            suggestion: Optional suggestion for resolving the error
            error_code: Structured error code (e.g., "STO-NOTFOUND-001")
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with error code and suggestion if available."""
        parts = []
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


class ConfigurationError(SideCardsError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is missing or malformed
    - vault_path does not exist or is not a directory
    - A setting is outside its allowed range
    """


class ValidationError(SideCardsError):
    """Invalid input to a store operation.

    Raised when:
    - An update names an immutable or unknown field
    - A record id does not have the token shape
    """


class NotFoundError(SideCardsError):
    """Operation referenced an id absent from the store.

    The operation is aborted before any mutation.
    """

    def __init__(self, record_id: str, suggestion: str | None = None):
        self.record_id = record_id
        super().__init__(
            f"Flashcard not found: {record_id}",
            suggestion=suggestion,
            error_code=ErrorCode.STO_NOT_FOUND.value,
            context={"record_id": record_id},
        )


class ParseError(SideCardsError):
    """A persisted record could not be decoded.

    The affected record is skipped in listings and reported; it never
    aborts loading of the remaining records.
    """


class StorageError(SideCardsError):
    """Underlying storage operation failed.

    Transient and user-visible. Callers leave in-memory state unchanged
    when this is raised.
    """


class AllocationError(SideCardsError):
    """Identifier allocation exhausted its attempts.

    Only reachable when the store is close to saturating the id space or the
    random source is broken.
    """


class ConflictWarning(UserWarning):
    """Identifier collision during allocation.

    Raised and caught inside the allocator, which retries with a new draw.
    """

    def __init__(self, candidate: str):
        self.candidate = candidate
        super().__init__(f"Identifier already taken: {candidate}")
