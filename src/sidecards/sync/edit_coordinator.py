"""Ephemeral edit sessions, one coordinator per view."""

from __future__ import annotations

from ..domain.entities import EditSession, FlashcardRecord
from ..error_codes import ErrorCode
from ..exceptions import NotFoundError, SideCardsError
from ..utils.logging import get_logger
from .flashcard_store import FlashcardStore

logger = get_logger(__name__)


class EditStateCoordinator:
    """Track unsaved edits for a single view.

    Only one record is edited at a time: opening a session evicts every
    other session and drops its pending content. Renderers call ``read`` so
    that a background refresh shows pending content instead of the stored
    record.
    """

    def __init__(self, view_id: str = "default"):
        self.view_id = view_id
        self._sessions: dict[str, EditSession] = {}

    def open(self, record_id: str, initial_text: str, initial_extra: str) -> EditSession:
        self.close_all_except(record_id)
        session = self._sessions.get(record_id)
        if session is None:
            session = EditSession(record_id, initial_text, initial_extra)
            self._sessions[record_id] = session
            logger.debug("edit_opened", view_id=self.view_id, record_id=record_id)
        return session

    def read(self, record_id: str) -> EditSession | None:
        return self._sessions.get(record_id)

    def is_open(self, record_id: str) -> bool:
        return record_id in self._sessions

    def open_ids(self) -> list[str]:
        return list(self._sessions)

    def set_pending(
        self, record_id: str, text: str | None = None, extra: str | None = None
    ) -> EditSession:
        """Update the pending fields of an open session.

        Raises:
            NotFoundError: If no session is open for the record
        """
        session = self._sessions.get(record_id)
        if session is None:
            raise NotFoundError(record_id, suggestion="Open an edit session first")
        if text is not None:
            session.pending_text = text
        if extra is not None:
            session.pending_extra = extra
        return session

    def close(self, record_id: str) -> EditSession | None:
        return self._sessions.pop(record_id, None)

    def close_all_except(self, record_id: str | None) -> list[str]:
        """Close every session except ``record_id``; returns the evicted ids."""
        evicted = [rid for rid in self._sessions if rid != record_id]
        for rid in evicted:
            del self._sessions[rid]
        if evicted:
            logger.debug(
                "edit_sessions_evicted",
                view_id=self.view_id,
                evicted=evicted,
                error_code=ErrorCode.EDT_EVICTED.value,
            )
        return evicted

    def close_all(self) -> list[str]:
        return self.close_all_except(None)

    def save(self, record_id: str, store: FlashcardStore) -> FlashcardRecord:
        """Commit pending content through ``store.update`` and close the session.

        If the update fails the session stays open with its pending content.

        Raises:
            NotFoundError: If no session is open, or the record is gone
            StorageError: If the record file cannot be written
        """
        session = self._sessions.get(record_id)
        if session is None:
            raise NotFoundError(record_id, suggestion="Open an edit session first")
        try:
            record = store.update(
                record_id, text=session.pending_text, extra=session.pending_extra
            )
        except SideCardsError as e:
            logger.warning(
                "edit_save_failed",
                view_id=self.view_id,
                record_id=record_id,
                error=e.message,
                error_code=ErrorCode.EDT_SAVE_FAILED.value,
            )
            raise
        self._sessions.pop(record_id, None)
        logger.debug("edit_saved", view_id=self.view_id, record_id=record_id)
        return record

    def cancel(self, record_id: str) -> bool:
        """Close without committing. Returns False if nothing was open."""
        return self.close(record_id) is not None


class EditSessionRegistry:
    """Coordinators keyed by view id."""

    def __init__(self) -> None:
        self._views: dict[str, EditStateCoordinator] = {}

    def for_view(self, view_id: str) -> EditStateCoordinator:
        coordinator = self._views.get(view_id)
        if coordinator is None:
            coordinator = EditStateCoordinator(view_id)
            self._views[view_id] = coordinator
        return coordinator

    def discard_view(self, view_id: str) -> list[str]:
        """Drop a view and its sessions without committing anything."""
        coordinator = self._views.pop(view_id, None)
        if coordinator is None:
            return []
        return coordinator.close_all()

    def views(self) -> list[str]:
        return list(self._views)
