"""Reference and lifecycle synchronization engine."""

from .edit_coordinator import EditSessionRegistry, EditStateCoordinator
from .flashcard_store import FlashcardStore
from .id_allocator import IdentifierAllocator
from .orphan_reclaimer import CollectResult, OrphanReclaimer, ReclaimReport
from .reference_stripper import ReferenceStripper, StripReport
from .refresh_runner import SingleSlotRunner
from .resolver import ReferenceResolver, resolve
from .token_scanner import (
    ScanResult,
    TextEdit,
    TokenScanner,
    insert_token,
    referenced_ids,
    scan_tokens,
    strip_tokens,
)

__all__ = [
    "CollectResult",
    "EditSessionRegistry",
    "EditStateCoordinator",
    "FlashcardStore",
    "IdentifierAllocator",
    "OrphanReclaimer",
    "ReclaimReport",
    "ReferenceResolver",
    "ReferenceStripper",
    "ScanResult",
    "SingleSlotRunner",
    "StripReport",
    "TextEdit",
    "TokenScanner",
    "insert_token",
    "referenced_ids",
    "resolve",
    "scan_tokens",
    "strip_tokens",
]
