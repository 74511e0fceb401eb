"""Per-view flashcard panel: rendering, editing and reference insertion."""

from __future__ import annotations

from dataclasses import dataclass

from ...constants import DEFAULT_EXTRA, DEFAULT_TEXT
from ...domain.entities import FlashcardRecord, SortedEntry, TokenOccurrence
from ...domain.interfaces.document_storage import IDocumentStorage
from ...exceptions import SideCardsError, ValidationError
from ...sync.edit_coordinator import EditStateCoordinator
from ...sync.flashcard_store import FlashcardStore
from ...sync.refresh_runner import SingleSlotRunner
from ...sync.resolver import ReferenceResolver
from ...sync.token_scanner import insert_token, scan_tokens
from ...utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderedCard:
    """What a panel shows for one entry of the document view."""

    record_id: str
    text: str
    extra: str
    owner_path: str
    is_sorted: bool
    editing: bool = False


class FlashcardPanel:
    """Orchestrates one view over the shared store.

    The panel follows an active document. Refreshes go through a
    SingleSlotRunner so overlapping requests coalesce, and rendering
    consults the view's EditStateCoordinator so that a refresh never
    replaces content the user is still editing.
    """

    def __init__(
        self,
        view_id: str,
        store: FlashcardStore,
        storage: IDocumentStorage,
        resolver: ReferenceResolver,
        coordinator: EditStateCoordinator,
        settle_delay: float = 0.0,
    ):
        self.view_id = view_id
        self.store = store
        self.storage = storage
        self.resolver = resolver
        self.coordinator = coordinator
        self.active_document: str | None = None
        self.cards: list[RenderedCard] = []
        self.focused_id: str | None = None
        self.runner = SingleSlotRunner(
            self._refresh_task, settle_delay=settle_delay, name=f"panel:{view_id}"
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def set_active_document(self, path: str | None) -> None:
        """Follow a different document; open edit sessions are closed."""
        if path == self.active_document:
            return
        evicted = self.coordinator.close_all()
        if evicted:
            logger.debug("panel_sessions_closed", view_id=self.view_id, evicted=evicted)
        self.active_document = path
        self.focused_id = None
        self.cards = []

    def _render(self, entry: SortedEntry) -> RenderedCard:
        record = entry.record
        session = self.coordinator.read(record.id)
        if session is not None:
            return RenderedCard(
                record_id=record.id,
                text=session.pending_text,
                extra=session.pending_extra,
                owner_path=record.owner_path,
                is_sorted=entry.is_sorted,
                editing=True,
            )
        return RenderedCard(
            record_id=record.id,
            text=record.text,
            extra=record.extra,
            owner_path=record.owner_path,
            is_sorted=entry.is_sorted,
        )

    async def refresh(self) -> list[RenderedCard]:
        """Rebuild the cards for the active document."""
        if self.active_document is None:
            self.cards = []
            return self.cards
        entries = self.resolver.view_for_document(self.active_document)
        self.cards = [self._render(entry) for entry in entries]
        logger.debug(
            "panel_refreshed",
            view_id=self.view_id,
            path=self.active_document,
            cards=len(self.cards),
        )
        return self.cards

    async def _refresh_task(self) -> None:
        await self.refresh()

    def request_refresh(self) -> None:
        """Schedule a coalesced refresh. Call from inside the event loop."""
        self.runner.request()

    def on_document_changed(self, path: str) -> None:
        if path == self.active_document:
            self.request_refresh()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def insert_reference(
        self,
        path: str,
        offset: int,
        text: str = DEFAULT_TEXT,
        extra: str = DEFAULT_EXTRA,
    ) -> FlashcardRecord:
        """Create a record owned by ``path`` and insert its token at ``offset``.

        If the document cannot be updated the new record is discarded again.
        """
        document = self.storage.read_text(path)
        if offset < 0 or offset > len(document):
            raise ValidationError(
                f"Offset {offset} outside document of length {len(document)}",
                suggestion="Use a character offset between 0 and the document length",
                context={"path": path, "offset": offset},
            )

        record = self.store.create(path, text=text, extra=extra)
        try:
            self.storage.write_text(path, insert_token(document, offset, record.id))
        except SideCardsError:
            try:
                self.store.discard(record.id)
            except SideCardsError as rollback_error:
                logger.error(
                    "insert_reference_rollback_failed",
                    path=path,
                    record_id=record.id,
                    **rollback_error.to_dict(),
                )
            else:
                logger.warning("insert_reference_rolled_back", path=path, record_id=record.id)
            raise
        logger.debug("reference_inserted", path=path, record_id=record.id, offset=offset)
        return record

    def begin_edit(self, record_id: str) -> None:
        record = self.store.require(record_id)
        self.coordinator.open(record_id, record.text, record.extra)

    def edit(self, record_id: str, text: str | None = None, extra: str | None = None) -> None:
        self.coordinator.set_pending(record_id, text=text, extra=extra)

    def save_edit(self, record_id: str) -> FlashcardRecord:
        return self.coordinator.save(record_id, self.store)

    def cancel_edit(self, record_id: str) -> bool:
        return self.coordinator.cancel(record_id)

    def delete_record(self, record_id: str) -> None:
        """Delete a record; its edit session survives a failed delete."""
        self.store.delete(record_id)
        self.coordinator.close(record_id)

    def focus(self, record_id: str) -> TokenOccurrence | None:
        """Close every edit session and locate the record's first token.

        Returns:
            First occurrence in the active document, or None if it has none
        """
        self.store.require(record_id)
        self.coordinator.close_all()
        self.focused_id = record_id
        if self.active_document is None:
            return None
        text = self.storage.read_text(self.active_document)
        for occurrence in scan_tokens(text, self.active_document):
            if occurrence.record_id == record_id:
                return occurrence
        return None

    def close(self) -> None:
        """Drop any pending refresh and discard unsaved edits."""
        self.runner.close()
        self.coordinator.close_all()
        self.active_document = None
        self.cards = []
