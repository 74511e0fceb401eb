"""Persistent flashcard store: one JSON file per record in the flashcard folder."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..constants import DEFAULT_EXTRA, DEFAULT_TEXT, RECORD_SUFFIX
from ..domain.entities import FlashcardRecord
from ..domain.entities.flashcard import MUTABLE_FIELDS
from ..domain.interfaces.document_storage import IDocumentStorage
from ..error_codes import ErrorCode
from ..exceptions import NotFoundError, ParseError, StorageError, ValidationError
from ..utils.logging import get_logger
from .id_allocator import IdentifierAllocator
from .reference_stripper import ReferenceStripper

logger = get_logger(__name__)


class FlashcardStore:
    """In-memory index of flashcard records backed by storage.

    Every mutation writes storage first and only then changes the index, so a
    failed write leaves the index as it was. One store is built per session
    and passed to every consumer.
    """

    def __init__(
        self,
        storage: IDocumentStorage,
        folder: str,
        allocator: IdentifierAllocator,
        stripper: ReferenceStripper,
    ):
        self.storage = storage
        self.folder = folder
        self.allocator = allocator
        self.stripper = stripper
        self._records: dict[str, FlashcardRecord] = {}
        self.unreadable: dict[str, str] = {}

    def record_path(self, record_id: str) -> str:
        return f"{self.folder}/{record_id}{RECORD_SUFFIX}"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _parse(self, path: str, raw: str) -> FlashcardRecord:
        try:
            record = FlashcardRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            raise ParseError(
                f"Invalid flashcard record: {path}",
                suggestion="Fix or remove the file; it is skipped until then",
                error_code=ErrorCode.STO_PARSE_FAILED.value,
                context={"path": path, "errors": e.error_count()},
            ) from e

        stem = PurePosixPath(path).name.removesuffix(RECORD_SUFFIX)
        if record.id != stem:
            raise ParseError(
                f"Record id {record.id!r} does not match file name: {path}",
                suggestion=f"Rename the file to {record.id}{RECORD_SUFFIX} or fix its id",
                error_code=ErrorCode.STO_ID_MISMATCH.value,
                context={"path": path, "record_id": record.id},
            )
        return record

    def load(self) -> int:
        """(Re)load every record from the flashcard folder.

        Unreadable records are skipped and listed in ``unreadable``.

        Returns:
            Number of records loaded
        """
        self.storage.ensure_folder(self.folder)
        records: dict[str, FlashcardRecord] = {}
        unreadable: dict[str, str] = {}

        for path in self.storage.list_files(self.folder, RECORD_SUFFIX):
            try:
                record = self._parse(path, self.storage.read_text(path))
            except (ParseError, StorageError) as e:
                logger.warning("record_unreadable", path=path, **e.to_dict())
                unreadable[path] = e.message
                continue
            records[record.id] = record

        self._records = records
        self.unreadable = unreadable
        if unreadable:
            logger.warning(
                "records_unreadable",
                count=len(unreadable),
                folder=self.folder,
                paths=sorted(unreadable),
            )
        logger.info("flashcards_loaded", count=len(records), folder=self.folder)
        return len(records)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, record_id: str) -> FlashcardRecord | None:
        return self._records.get(record_id)

    def require(self, record_id: str) -> FlashcardRecord:
        record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(record_id)
        return record

    def list(self) -> list[FlashcardRecord]:
        """All records, oldest first (ties broken by id)."""
        return sorted(self._records.values(), key=lambda r: (r.created_at, r.id))

    def ids(self) -> set[str]:
        return set(self._records)

    def unreadable_ids(self) -> set[str]:
        """Ids named by record files that failed to load."""
        return {
            PurePosixPath(path).name.removesuffix(RECORD_SUFFIX) for path in self.unreadable
        }

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _is_taken(self, candidate: str) -> bool:
        return candidate in self._records or self.storage.exists(self.record_path(candidate))

    def create(
        self,
        owner_path: str,
        text: str = DEFAULT_TEXT,
        extra: str = DEFAULT_EXTRA,
    ) -> FlashcardRecord:
        """Create and persist a new record owned by ``owner_path``.

        Raises:
            AllocationError: If no free id could be drawn
            StorageError: If the record file cannot be created
        """
        record_id = self.allocator.allocate(self._is_taken)
        record = FlashcardRecord(id=record_id, text=text, extra=extra, owner_path=owner_path)
        self.storage.create_file(self.record_path(record_id), record.to_json())
        self._records[record_id] = record
        logger.info("flashcard_created", record_id=record_id, owner_path=owner_path)
        return record

    def update(self, record_id: str, **changes: Any) -> FlashcardRecord:
        """Change ``text``, ``extra`` and/or ``owner_path`` of a record.

        Raises:
            NotFoundError: If the id is absent
            ValidationError: If a field is immutable, unknown or not a string
            StorageError: If the record file cannot be written
        """
        record = self.require(record_id)

        invalid = sorted(set(changes) - MUTABLE_FIELDS)
        if invalid:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(invalid)}",
                suggestion=f"Only {', '.join(sorted(MUTABLE_FIELDS))} can be changed",
                error_code=ErrorCode.STO_INVALID_FIELD.value,
                context={"record_id": record_id, "fields": invalid},
            )
        not_text = sorted(k for k, v in changes.items() if not isinstance(v, str))
        if not_text:
            raise ValidationError(
                f"Field(s) must be strings: {', '.join(not_text)}",
                error_code=ErrorCode.STO_INVALID_FIELD.value,
                context={"record_id": record_id, "fields": not_text},
            )

        updated = record.model_copy(update=changes)
        if updated == record:
            return record
        self.storage.write_text(self.record_path(record_id), updated.to_json())
        self._records[record_id] = updated
        logger.debug("flashcard_updated", record_id=record_id, fields=sorted(changes))
        return updated

    def _remove_file(self, record_id: str) -> None:
        path = self.record_path(record_id)
        if self.storage.exists(path):
            self.storage.delete_file(path)
        self._records.pop(record_id, None)

    def delete(self, record_id: str) -> None:
        """Delete a record and strip its tokens from every document.

        Stripping is best-effort per document; documents that fail are
        logged and left for the reclaimer to clean up later.

        Raises:
            NotFoundError: If the id is absent
            StorageError: If the record file cannot be deleted
        """
        self.require(record_id)
        report = self.stripper.strip_ids([record_id])
        self._remove_file(record_id)
        logger.info(
            "flashcard_deleted",
            record_id=record_id,
            documents_rewritten=len(report.rewritten),
            documents_failed=len(report.failed),
        )

    def discard(self, record_id: str) -> FlashcardRecord:
        """Remove a record without touching documents."""
        record = self.require(record_id)
        self._remove_file(record_id)
        logger.debug("flashcard_discarded", record_id=record_id)
        return record
