"""Order a document's flashcards by where their tokens appear."""

from __future__ import annotations

from collections.abc import Iterable

from ..domain.entities import FlashcardRecord, SortedEntry
from ..domain.interfaces.document_storage import IDocumentStorage
from ..utils.logging import get_logger
from .flashcard_store import FlashcardStore
from .token_scanner import TokenScanner, scan_tokens

logger = get_logger(__name__)


def resolve(
    records: Iterable[FlashcardRecord], text: str, *, dedupe: bool = False
) -> list[SortedEntry]:
    """Build the ordered view of ``records`` for a document's ``text``.

    Records with no token in the text come first, in the order given, marked
    unsorted. Then each token occurrence contributes its record in document
    order. A record referenced twice appears twice unless ``dedupe`` is set.
    Tokens naming records not in ``records`` are skipped.

    Example:
        Records A, B, C and text ``"&bbbbbb then &aaaaaa"`` resolve to
        [C, B, A] with is_sorted [False, True, True].
    """
    by_id: dict[str, FlashcardRecord] = {}
    for record in records:
        by_id.setdefault(record.id, record)
    return _resolve(by_id, [o.record_id for o in scan_tokens(text)], dedupe)


def _resolve(
    by_id: dict[str, FlashcardRecord], token_ids: list[str], dedupe: bool
) -> list[SortedEntry]:
    present = set(token_ids)
    entries = [
        SortedEntry(record, is_sorted=False)
        for record_id, record in by_id.items()
        if record_id not in present
    ]
    seen: set[str] = set()
    for record_id in token_ids:
        record = by_id.get(record_id)
        if record is None:
            continue
        if dedupe and record_id in seen:
            continue
        seen.add(record_id)
        entries.append(SortedEntry(record, is_sorted=True))
    return entries


class ReferenceResolver:
    """Resolve documents in storage against the store."""

    def __init__(
        self,
        store: FlashcardStore,
        storage: IDocumentStorage,
        scanner: TokenScanner,
        dedupe: bool = False,
    ):
        self.store = store
        self.storage = storage
        self.scanner = scanner
        self.dedupe = dedupe

    def candidates(self, path: str, token_ids: Iterable[str]) -> list[FlashcardRecord]:
        """Records owned by ``path`` plus records its tokens reference, in store order."""
        referenced = set(token_ids)
        return [r for r in self.store.list() if r.owner_path == path or r.id in referenced]

    def view_for_text(
        self, path: str, text: str, *, dedupe: bool | None = None
    ) -> list[SortedEntry]:
        result = self.scanner.scan(text, path)
        token_ids = [o.record_id for o in result.occurrences]
        by_id = {r.id: r for r in self.candidates(path, token_ids)}
        return _resolve(by_id, token_ids, self.dedupe if dedupe is None else dedupe)

    def view_for_document(self, path: str, *, dedupe: bool | None = None) -> list[SortedEntry]:
        """Read ``path`` and resolve it.

        Raises:
            StorageError: If the document cannot be read
        """
        entries = self.view_for_text(path, self.storage.read_text(path), dedupe=dedupe)
        logger.debug("document_resolved", path=path, entries=len(entries))
        return entries

    def dangling_ids(self, path: str) -> list[str]:
        """Ids referenced by ``path`` that have no record, in first-occurrence order."""
        result = self.scanner.scan(self.storage.read_text(path), path)
        return [record_id for record_id in result.ids if record_id not in self.store]
