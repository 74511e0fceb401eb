"""Domain interfaces package."""

from .document_storage import IDocumentStorage

__all__ = ["IDocumentStorage"]
