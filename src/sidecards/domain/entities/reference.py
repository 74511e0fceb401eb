"""Derived entities: token occurrences and resolved view entries."""

from dataclasses import dataclass

from .flashcard import FlashcardRecord


@dataclass(frozen=True)
class TokenOccurrence:
    """One inline token found in a document.

    Offsets are character positions into the document text; ``end`` is
    exclusive, so ``text[start:end]`` is the full token including the sigil.
    """

    document_path: str
    start: int
    end: int
    record_id: str

    def __post_init__(self) -> None:
        if self.start < 0 or self.end <= self.start:
            msg = f"Invalid occurrence span: {self.start}..{self.end}"
            raise ValueError(msg)


@dataclass(frozen=True)
class SortedEntry:
    """A record in a document's resolved view.

    ``is_sorted`` is False for records that have no token in the document
    (they are listed first) and True for records placed by token position.
    """

    record: FlashcardRecord
    is_sorted: bool

    @property
    def record_id(self) -> str:
        return self.record.id
