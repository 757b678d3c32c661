from __future__ import annotations

from .models import ErrorKind, InventoryError, RepositoryRecord

__all__ = ["ErrorKind", "InventoryError", "RepositoryRecord"]
