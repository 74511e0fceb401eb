"""Domain layer for sidecards.

Entities describe flashcard records and their inline references; interfaces
describe the storage the synchronization engine runs against.
"""

from .entities import EditSession, FlashcardRecord, SortedEntry, TokenOccurrence
from .interfaces.document_storage import IDocumentStorage

__all__ = [
    # Entities
    "EditSession",
    "FlashcardRecord",
    # Interfaces
    "IDocumentStorage",
    "SortedEntry",
    "TokenOccurrence",
]
