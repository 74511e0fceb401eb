"""Domain entity for persisted flashcard records."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...constants import TOKEN_ID_LENGTH, TOKEN_SIGIL

RECORD_ID_PATTERN = re.compile(rf"^[A-Za-z0-9]{{{TOKEN_ID_LENGTH}}}$")

# Fields a store update may change; id and created_at are set once.
MUTABLE_FIELDS = frozenset({"text", "extra", "owner_path"})


def is_valid_record_id(value: str) -> bool:
    """Check whether a string has the record id shape."""
    return bool(RECORD_ID_PATTERN.match(value))


def utc_now() -> datetime:
    return datetime.now(UTC)


class FlashcardRecord(BaseModel):
    """A flashcard referenced from documents by an inline token.

    Serialized as one JSON file per record. ``owner_path`` is the document
    the record was created from; it is informational and does not restrict
    where the record may be referenced.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    text: str = ""
    extra: str = ""
    owner_path: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("id")
    @classmethod
    def _check_id(cls, v: str) -> str:
        if not is_valid_record_id(v):
            msg = f"record id must be {TOKEN_ID_LENGTH} alphanumeric characters: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("created_at")
    @classmethod
    def _ensure_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def token(self) -> str:
        """The inline token that references this record."""
        return f"{TOKEN_SIGIL}{self.id}"

    def to_json(self) -> str:
        return self.model_dump_json(indent=2) + "\n"
