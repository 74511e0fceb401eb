"""Application layer: session wiring and per-view services."""

from .services.flashcard_panel import FlashcardPanel, RenderedCard
from .session import SideCardsSession

__all__ = ["FlashcardPanel", "RenderedCard", "SideCardsSession"]
