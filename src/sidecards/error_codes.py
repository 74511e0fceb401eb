"""Structured error codes for machine-readable error handling.

Error codes follow the format: {DOMAIN}-{CATEGORY}-{NUMBER}

Error Domains:
    STO - Flashcard store and storage I/O
    ALC - Identifier allocation
    REC - Orphan reclamation and reference stripping
    EDT - Edit sessions
    CFG - Configuration

Usage:
    from sidecards.error_codes import ErrorCode

    logger.warning(
        "record_unreadable",
        error_code=ErrorCode.STO_PARSE_FAILED.value,
        path=path,
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes for machine-readable handling.

    All error codes inherit from str for JSON serialization compatibility.
    """

    # =========================================================================
    # Store / storage errors (STO-xxx-xxx)
    # =========================================================================
    STO_NOT_FOUND = "STO-NOTFOUND-001"
    """Record id is absent from the store."""

    STO_PARSE_FAILED = "STO-PARSE-001"
    """Persisted record is not valid JSON or fails validation."""

    STO_ID_MISMATCH = "STO-PARSE-002"
    """Record file name does not match the id stored inside it."""

    STO_READ_FAILED = "STO-IO-001"
    """Reading a document or record file failed."""

    STO_WRITE_FAILED = "STO-IO-002"
    """Writing a document or record file failed."""

    STO_DELETE_FAILED = "STO-IO-003"
    """Deleting a record file failed."""

    STO_PATH_OUTSIDE_VAULT = "STO-PATH-001"
    """A storage path escapes the vault root."""

    STO_INVALID_FIELD = "STO-FIELD-001"
    """Update named an immutable or unknown field."""

    # =========================================================================
    # Allocation errors (ALC-xxx-xxx)
    # =========================================================================
    ALC_COLLISION = "ALC-COLLISION-001"
    """Drawn identifier already exists; allocation retried."""

    ALC_EXHAUSTED = "ALC-EXHAUSTED-001"
    """Allocation gave up after the maximum number of collisions."""

    # =========================================================================
    # Reclamation errors (REC-xxx-xxx)
    # =========================================================================
    REC_DOCUMENT_READ = "REC-DOC-001"
    """Document could not be read during a sweep; skipped."""

    REC_DOCUMENT_WRITE = "REC-DOC-002"
    """Document could not be rewritten after stripping tokens; skipped."""

    REC_RECORD_DELETE = "REC-RECORD-001"
    """Unreferenced record could not be deleted; skipped."""

    REC_UNREADABLE_RECORD = "REC-RECORD-002"
    """Record file exists but did not load; its tokens are kept."""

    REC_INCOMPLETE_COLLECT = "REC-COLLECT-001"
    """Collect phase missed documents; record deletion withheld."""

    # =========================================================================
    # Edit session errors (EDT-xxx-xxx)
    # =========================================================================
    EDT_SAVE_FAILED = "EDT-SAVE-001"
    """Committing an edit session failed; session kept open."""

    EDT_EVICTED = "EDT-EVICT-001"
    """An open session was evicted by a competing session."""

    # =========================================================================
    # Configuration errors (CFG-xxx-xxx)
    # =========================================================================
    CFG_LOAD_FAILED = "CFG-LOAD-001"
    """Configuration file could not be parsed."""

    CFG_INVALID_VALUE = "CFG-VALUE-001"
    """Configuration value outside its allowed range."""


__all__ = ["ErrorCode"]
