"""Infrastructure layer: filesystem-backed storage."""

from .vault_storage import VaultStorage

__all__ = ["VaultStorage"]
