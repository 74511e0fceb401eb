"""Remove tokens from documents, one document at a time."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ..domain.interfaces.document_storage import IDocumentStorage
from ..exceptions import StorageError
from ..utils.logging import get_logger
from .token_scanner import strip_tokens

logger = get_logger(__name__)


@dataclass
class StripReport:
    """Outcome of stripping tokens across documents.

    ``rewritten`` maps document path to the number of tokens removed and only
    contains documents whose new text was written successfully.
    """

    rewritten: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def tokens_removed(self) -> int:
        return sum(self.rewritten.values())


class ReferenceStripper:
    """Strip tokens matching a predicate from documents in storage.

    Each document is read, stripped and written back only if something was
    removed. A failing document is recorded and skipped; the rest continue.
    """

    def __init__(self, storage: IDocumentStorage):
        self.storage = storage

    def strip_document(self, path: str, should_strip: Callable[[str], bool]) -> int:
        """Strip one document.

        Returns:
            Number of tokens removed (0 means the document was not written)

        Raises:
            StorageError: If the document cannot be read or written
        """
        text = self.storage.read_text(path)
        new_text, removed = strip_tokens(text, should_strip)
        if removed:
            self.storage.write_text(path, new_text)
            logger.debug("tokens_stripped", path=path, count=len(removed))
        return len(removed)

    def strip(
        self,
        should_strip: Callable[[str], bool],
        documents: Iterable[str] | None = None,
        *,
        dry_run: bool = False,
    ) -> StripReport:
        report = StripReport()
        paths = self.storage.list_documents() if documents is None else documents
        for path in paths:
            try:
                if dry_run:
                    _, removed = strip_tokens(self.storage.read_text(path), should_strip)
                    count = len(removed)
                else:
                    count = self.strip_document(path, should_strip)
            except StorageError as e:
                logger.warning("strip_document_failed", path=path, **e.to_dict())
                report.failed[path] = e.message
                continue
            if count:
                report.rewritten[path] = count
        return report

    def strip_ids(self, record_ids: Iterable[str], documents: Iterable[str] | None = None) -> StripReport:
        """Strip every token referencing one of ``record_ids``."""
        targets = frozenset(record_ids)
        return self.strip(targets.__contains__, documents)
