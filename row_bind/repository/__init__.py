"""Repository layer - typed query wrappers."""

from __future__ import annotations

from row_bind.repository.base import Repository

__all__ = [
    "Repository",
]
