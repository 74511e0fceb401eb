"""Inline token scanning for Markdown documents.

A token is the sigil followed by exactly TOKEN_ID_LENGTH alphanumeric
characters (``&abc123``). It must not touch another alphanumeric character
or sigil on either side, so ``&abc1234``, ``x&abc123`` and
``&abc123&def456`` are not tokens. Because a match only depends on the
character before it and the character after it, scanning is local and can
be restricted to the neighbourhood of an edit.
"""

from __future__ import annotations

import hashlib
import re
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from ..constants import TOKEN_ID_LENGTH, TOKEN_SIGIL
from ..domain.entities import TokenOccurrence
from ..utils.logging import get_logger

logger = get_logger(__name__)

_BOUNDARY = rf"A-Za-z0-9{re.escape(TOKEN_SIGIL)}"
TOKEN_PATTERN = re.compile(
    rf"(?<![{_BOUNDARY}]){re.escape(TOKEN_SIGIL)}([A-Za-z0-9]{{{TOKEN_ID_LENGTH}}})(?![{_BOUNDARY}])"
)
TOKEN_LENGTH = len(TOKEN_SIGIL) + TOKEN_ID_LENGTH

# A match depends on one character either side of the token.
MIN_SCAN_MARGIN = TOKEN_LENGTH + 1


def format_token(record_id: str) -> str:
    """Render the inline token for a record id."""
    return f"{TOKEN_SIGIL}{record_id}"


def content_hash(text: str) -> str:
    """SHA-256 of the document text, used as the scan cache key."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def scan_tokens(text: str, document_path: str = "") -> list[TokenOccurrence]:
    """Find every token in ``text``, left to right."""
    return [
        TokenOccurrence(document_path, m.start(), m.end(), m.group(1))
        for m in TOKEN_PATTERN.finditer(text)
    ]


def referenced_ids(text: str) -> list[str]:
    """Ids referenced by ``text`` in first-occurrence order, without duplicates."""
    return list(dict.fromkeys(m.group(1) for m in TOKEN_PATTERN.finditer(text)))


def strip_tokens(
    text: str, should_strip: Callable[[str], bool]
) -> tuple[str, list[str]]:
    """Remove tokens whose id satisfies ``should_strip``.

    Only the token itself is removed; surrounding whitespace is left alone.

    Returns:
        Tuple of (new text, ids removed in document order, with repeats)
    """
    removed: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        record_id = match.group(1)
        if should_strip(record_id):
            removed.append(record_id)
            return ""
        return match.group(0)

    new_text = TOKEN_PATTERN.sub(_replace, text)
    return new_text, removed


def insert_token(text: str, offset: int, record_id: str) -> str:
    """Insert `` &<id>`` at a cursor offset.

    A trailing space is added when the following character would otherwise
    glue onto the token and stop it from matching.
    """
    if offset < 0 or offset > len(text):
        msg = f"Offset {offset} outside document of length {len(text)}"
        raise ValueError(msg)
    insertion = " " + format_token(record_id)
    following = text[offset : offset + 1]
    if following and ((following.isascii() and following.isalnum()) or following == TOKEN_SIGIL):
        insertion += " "
    return text[:offset] + insertion + text[offset:]


@dataclass(frozen=True)
class TextEdit:
    """A single contiguous replacement: ``removed`` at ``start`` became ``inserted``."""

    start: int
    removed: str
    inserted: str

    @property
    def delta(self) -> int:
        return len(self.inserted) - len(self.removed)

    @property
    def is_structural(self) -> bool:
        return "\n" in self.removed or "\n" in self.inserted

    def previous_text(self, new_text: str) -> str:
        """Reconstruct the text as it was before the edit."""
        end = self.start + len(self.inserted)
        return new_text[: self.start] + self.removed + new_text[end:]


@dataclass(frozen=True)
class ScanResult:
    """Occurrences found in one version of a document."""

    document_path: str
    content_hash: str
    occurrences: tuple[TokenOccurrence, ...]

    @property
    def ids(self) -> list[str]:
        return list(dict.fromkeys(o.record_id for o in self.occurrences))


class TokenScanner:
    """Scanner front end with a content-hash keyed LRU cache.

    ``scan`` recomputes only when the text's hash is new. ``rescan_edit``
    rescans the edited range plus ``margin`` characters on each side and
    shifts the untouched occurrences, falling back to a full scan for
    multi-line edits or when ``previous`` does not match the pre-edit text.
    """

    def __init__(self, cache_size: int = 256, margin: int = 16):
        if margin < MIN_SCAN_MARGIN:
            msg = f"margin must be >= {MIN_SCAN_MARGIN}: {margin}"
            raise ValueError(msg)
        self.cache_size = cache_size
        self.margin = margin
        self._cache: OrderedDict[str, tuple[tuple[int, int, str], ...]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _cache_get(self, key: str) -> tuple[tuple[int, int, str], ...] | None:
        spans = self._cache.get(key)
        if spans is not None:
            self._cache.move_to_end(key)
        return spans

    def _cache_put(self, key: str, spans: tuple[tuple[int, int, str], ...]) -> None:
        if self.cache_size <= 0:
            return
        self._cache[key] = spans
        self._cache.move_to_end(key)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    @staticmethod
    def _build(
        document_path: str, key: str, spans: tuple[tuple[int, int, str], ...]
    ) -> ScanResult:
        return ScanResult(
            document_path=document_path,
            content_hash=key,
            occurrences=tuple(
                TokenOccurrence(document_path, start, end, record_id)
                for start, end, record_id in spans
            ),
        )

    def scan(self, text: str, document_path: str = "") -> ScanResult:
        key = content_hash(text)
        spans = self._cache_get(key)
        if spans is not None:
            self.hits += 1
        else:
            self.misses += 1
            spans = tuple(
                (m.start(), m.end(), m.group(1)) for m in TOKEN_PATTERN.finditer(text)
            )
            self._cache_put(key, spans)
        return self._build(document_path, key, spans)

    def rescan_edit(self, previous: ScanResult, new_text: str, edit: TextEdit) -> ScanResult:
        """Update ``previous`` for ``new_text`` after a single edit."""
        path = previous.document_path
        new_end = edit.start + len(edit.inserted)
        if edit.start < 0 or new_end > len(new_text) or new_text[edit.start:new_end] != edit.inserted:
            logger.debug("rescan_fallback", path=path, reason="edit_out_of_range")
            return self.scan(new_text, path)
        if edit.is_structural:
            logger.debug("rescan_fallback", path=path, reason="structural_edit")
            return self.scan(new_text, path)
        if content_hash(edit.previous_text(new_text)) != previous.content_hash:
            logger.debug("rescan_fallback", path=path, reason="stale_previous")
            return self.scan(new_text, path)

        key = content_hash(new_text)
        cached = self._cache_get(key)
        if cached is not None:
            self.hits += 1
            return self._build(path, key, cached)

        window_start = max(0, edit.start - self.margin)
        window_end = new_end + self.margin
        old_tail_start = edit.start + len(edit.removed) + self.margin
        delta = edit.delta

        spans: list[tuple[int, int, str]] = [
            (o.start, o.end, o.record_id)
            for o in previous.occurrences
            if o.start < window_start
        ]
        for m in TOKEN_PATTERN.finditer(new_text, window_start):
            if m.start() >= window_end:
                break
            spans.append((m.start(), m.end(), m.group(1)))
        spans.extend(
            (o.start + delta, o.end + delta, o.record_id)
            for o in previous.occurrences
            if o.start >= old_tail_start
        )

        result = tuple(spans)
        self.misses += 1
        self._cache_put(key, result)
        return self._build(path, key, result)
