"""Domain entities package."""

from .edit_session import EditSession
from .flashcard import FlashcardRecord, is_valid_record_id
from .reference import SortedEntry, TokenOccurrence

__all__ = [
    "EditSession",
    "FlashcardRecord",
    "SortedEntry",
    "TokenOccurrence",
    "is_valid_record_id",
]
