"""Explicit wiring of the engine for one vault."""

from __future__ import annotations

import random
from types import TracebackType

from ..config_settings import Config
from ..domain.interfaces.document_storage import IDocumentStorage
from ..infrastructure.vault_storage import VaultStorage
from ..sync.edit_coordinator import EditSessionRegistry
from ..sync.flashcard_store import FlashcardStore
from ..sync.id_allocator import IdentifierAllocator
from ..sync.orphan_reclaimer import OrphanReclaimer
from ..sync.reference_stripper import ReferenceStripper
from ..sync.resolver import ReferenceResolver
from ..sync.token_scanner import TokenScanner
from ..utils.logging import get_logger
from .services.flashcard_panel import FlashcardPanel

logger = get_logger(__name__)


class SideCardsSession:
    """Owns the store and every component built around it.

    One session per vault. The store is loaded by ``open`` (or on entering
    the context manager) and shared by the resolver, the reclaimer and all
    panels; nothing is held at module level.

    Args:
        config: Validated configuration
        storage: Storage to use instead of a VaultStorage on ``config.vault_path``
        rng: Random source for the identifier allocator (tests)
    """

    def __init__(
        self,
        config: Config,
        storage: IDocumentStorage | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.storage = (
            storage
            if storage is not None
            else VaultStorage(config.vault_path, config.flashcard_folder)
        )
        self.scanner = TokenScanner(
            cache_size=config.scan_cache_size, margin=config.scan_margin
        )
        self.allocator = IdentifierAllocator(
            rng=rng, max_attempts=config.allocator_max_attempts
        )
        self.stripper = ReferenceStripper(self.storage)
        self.store = FlashcardStore(
            self.storage, config.flashcard_folder, self.allocator, self.stripper
        )
        self.resolver = ReferenceResolver(
            self.store, self.storage, self.scanner, dedupe=config.dedupe_sorted_view
        )
        self.reclaimer = OrphanReclaimer(
            self.store, self.storage, self.scanner, self.stripper
        )
        self.edit_sessions = EditSessionRegistry()
        self._panels: dict[str, FlashcardPanel] = {}

    def open(self) -> SideCardsSession:
        self.store.load()
        logger.debug("session_opened", records=len(self.store))
        return self

    def panel(self, view_id: str) -> FlashcardPanel:
        """Get or create the panel for a view."""
        panel = self._panels.get(view_id)
        if panel is None:
            panel = FlashcardPanel(
                view_id=view_id,
                store=self.store,
                storage=self.storage,
                resolver=self.resolver,
                coordinator=self.edit_sessions.for_view(view_id),
                settle_delay=self.config.refresh_settle_delay,
            )
            self._panels[view_id] = panel
        return panel

    def close_panel(self, view_id: str) -> None:
        panel = self._panels.pop(view_id, None)
        if panel is not None:
            panel.close()
        self.edit_sessions.discard_view(view_id)

    def notify_document_changed(self, path: str) -> None:
        """Forward an external document change to every panel showing it."""
        for panel in self._panels.values():
            panel.on_document_changed(path)

    def close(self) -> None:
        for view_id in list(self._panels):
            self.close_panel(view_id)
        logger.debug("session_closed")

    def __enter__(self) -> SideCardsSession:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
