"""Random identifier allocation for new flashcard records."""

from __future__ import annotations

import random
import secrets
from collections.abc import Callable

from ..constants import ID_ALPHABET, TOKEN_ID_LENGTH
from ..error_codes import ErrorCode
from ..exceptions import AllocationError, ConflictWarning
from ..utils.logging import get_logger

logger = get_logger(__name__)


class IdentifierAllocator:
    """Draw fixed-length ids and retry on collision.

    The allocator holds no record state: callers pass an ``is_taken``
    predicate that checks their own index (and disk, for the store).

    Args:
        alphabet: Characters ids are drawn from
        length: Id length
        rng: Random source; defaults to ``secrets.SystemRandom``
        max_attempts: Collisions tolerated before giving up
    """

    def __init__(
        self,
        alphabet: str = ID_ALPHABET,
        length: int = TOKEN_ID_LENGTH,
        rng: random.Random | None = None,
        max_attempts: int = 32,
    ):
        if not alphabet or len(set(alphabet)) != len(alphabet):
            msg = "alphabet must be non-empty without repeated characters"
            raise ValueError(msg)
        if length < 1 or max_attempts < 1:
            msg = "length and max_attempts must be positive"
            raise ValueError(msg)
        self.alphabet = alphabet
        self.length = length
        self.max_attempts = max_attempts
        self._rng = rng or secrets.SystemRandom()

    @property
    def id_space(self) -> int:
        return len(self.alphabet) ** self.length

    def draw(self) -> str:
        """Draw one candidate id, uniform over the alphabet."""
        return "".join(self._rng.choice(self.alphabet) for _ in range(self.length))

    def _claim(self, is_taken: Callable[[str], bool]) -> str:
        candidate = self.draw()
        if is_taken(candidate):
            raise ConflictWarning(candidate)
        return candidate

    def allocate(self, is_taken: Callable[[str], bool]) -> str:
        """Return an id for which ``is_taken`` is false.

        Raises:
            AllocationError: After ``max_attempts`` consecutive collisions
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._claim(is_taken)
            except ConflictWarning as w:
                logger.warning(
                    "id_collision",
                    candidate=w.candidate,
                    attempt=attempt,
                    error_code=ErrorCode.ALC_COLLISION.value,
                )

        raise AllocationError(
            f"Could not allocate a free identifier after {self.max_attempts} attempts",
            suggestion="Check the random source, or reclaim unreferenced flashcards",
            error_code=ErrorCode.ALC_EXHAUSTED.value,
            context={"max_attempts": self.max_attempts, "id_space": self.id_space},
        )
