"""Application services."""

from .flashcard_panel import FlashcardPanel, RenderedCard

__all__ = ["FlashcardPanel", "RenderedCard"]
