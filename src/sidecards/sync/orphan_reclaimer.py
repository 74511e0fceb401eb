"""Reconcile records and documents: drop unreferenced records, strip dangling tokens.

A sweep runs in two phases. ``collect`` reads every document and builds the
set of referenced ids without mutating anything. The apply phase then
discards records outside that set and removes tokens whose record no longer
exists. Tokens of records whose file exists but failed to load are kept so
a retry can recover them. Failures on single documents or records are logged and reported,
never raised, so one bad file cannot block reconciliation of the rest.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from ..domain.entities import FlashcardRecord
from ..domain.interfaces.document_storage import IDocumentStorage
from ..error_codes import ErrorCode
from ..exceptions import StorageError
from ..utils.logging import get_logger
from .flashcard_store import FlashcardStore
from .reference_stripper import ReferenceStripper
from .token_scanner import TokenScanner

logger = get_logger(__name__)


class CollectResult(BaseModel):
    """Referenced ids across all readable documents."""

    referenced: set[str] = Field(default_factory=set)
    scanned: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complete(self) -> bool:
        """True when every document could be read."""
        return not self.failed


class ReclaimReport(BaseModel):
    """Outcome of a sweep. Only confirmed changes are listed."""

    dry_run: bool = False
    deleted: list[str] = Field(default_factory=list)
    failed_records: dict[str, str] = Field(default_factory=dict)
    deletion_skipped: bool = False
    stripped_tokens: int = Field(default=0, ge=0)
    rewritten_documents: list[str] = Field(default_factory=list)
    failed_documents: dict[str, str] = Field(default_factory=dict)
    # Ids whose tokens were kept because their record file exists but did not load.
    unreadable_references: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def changed(self) -> bool:
        return bool(self.deleted or self.stripped_tokens)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_failures(self) -> bool:
        return bool(self.failed_records or self.failed_documents)


class OrphanReclaimer:
    """Garbage collection for flashcard records and tokens."""

    def __init__(
        self,
        store: FlashcardStore,
        storage: IDocumentStorage,
        scanner: TokenScanner,
        stripper: ReferenceStripper,
    ):
        self.store = store
        self.storage = storage
        self.scanner = scanner
        self.stripper = stripper

    def collect(self) -> CollectResult:
        """Union of ids referenced by every document. Read-only."""
        result = CollectResult()
        for path in self.storage.list_documents():
            try:
                text = self.storage.read_text(path)
            except StorageError as e:
                logger.warning(
                    "collect_document_failed",
                    path=path,
                    error=e.message,
                    error_code=ErrorCode.REC_DOCUMENT_READ.value,
                )
                result.failed[path] = e.message
                continue
            result.referenced.update(self.scanner.scan(text, path).ids)
            result.scanned.append(path)
        logger.debug(
            "references_collected",
            documents=len(result.scanned),
            failed=len(result.failed),
            referenced=len(result.referenced),
        )
        return result

    def find_unreferenced(self) -> list[FlashcardRecord]:
        """Records that no readable document references."""
        referenced = self.collect().referenced
        return [r for r in self.store.list() if r.id not in referenced]

    def sweep(self, dry_run: bool = False) -> ReclaimReport:
        """Delete unreferenced records and strip dangling tokens.

        If some document could not be read, the referenced set is incomplete
        and record deletion is skipped for this sweep; dangling tokens are
        still stripped from the documents that were read.
        """
        report = ReclaimReport(dry_run=dry_run)
        collected = self.collect()

        unreferenced = [r.id for r in self.store.list() if r.id not in collected.referenced]
        if collected.failed and unreferenced:
            report.deletion_skipped = True
            logger.warning(
                "reclaim_incomplete_collect",
                unreadable_documents=sorted(collected.failed),
                candidates=len(unreferenced),
                error_code=ErrorCode.REC_INCOMPLETE_COLLECT.value,
            )
        else:
            for record_id in unreferenced:
                if dry_run:
                    report.deleted.append(record_id)
                    continue
                try:
                    self.store.discard(record_id)
                except StorageError as e:
                    logger.warning(
                        "reclaim_record_failed",
                        record_id=record_id,
                        error=e.message,
                        error_code=ErrorCode.REC_RECORD_DELETE.value,
                    )
                    report.failed_records[record_id] = e.message
                    continue
                report.deleted.append(record_id)

        unreadable = self.store.unreadable_ids()
        kept: set[str] = set()

        def is_dangling(record_id: str) -> bool:
            if record_id in self.store:
                return False
            # A record file that exists but failed to load is not dangling.
            if record_id in unreadable or self.storage.exists(self.store.record_path(record_id)):
                kept.add(record_id)
                return False
            return True

        strip_report = self.stripper.strip(
            is_dangling, documents=collected.scanned, dry_run=dry_run
        )
        report.unreadable_references = sorted(kept)
        if kept:
            logger.warning(
                "reclaim_unreadable_records_kept",
                record_ids=report.unreadable_references,
                error_code=ErrorCode.REC_UNREADABLE_RECORD.value,
            )
        report.stripped_tokens = strip_report.tokens_removed
        report.rewritten_documents = sorted(strip_report.rewritten)
        report.failed_documents = {**collected.failed, **strip_report.failed}
        for path in strip_report.failed:
            logger.warning(
                "reclaim_document_failed",
                path=path,
                error_code=ErrorCode.REC_DOCUMENT_WRITE.value,
            )

        logger.info(
            "reclaim_completed",
            dry_run=dry_run,
            deleted=len(report.deleted),
            stripped_tokens=report.stripped_tokens,
            failed_documents=len(report.failed_documents),
        )
        return report

    def delete_unreferenced(self) -> int:
        """Run a sweep and return how many records it deleted."""
        return len(self.sweep().deleted)
