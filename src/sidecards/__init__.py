"""sidecards: inline flashcard references for Markdown vaults."""

__version__ = "0.1.0"

from sidecards.domain.entities import EditSession, FlashcardRecord, SortedEntry, TokenOccurrence

__all__ = ["EditSession", "FlashcardRecord", "SortedEntry", "TokenOccurrence"]
