"""In-progress edit of one flashcard."""

from dataclasses import dataclass


@dataclass
class EditSession:
    """Pending content for a record that is open in an editor.

    Lives only in memory; closing the session without saving discards it.
    """

    record_id: str
    pending_text: str
    pending_extra: str
