"""Read-side repositories executing hierarchy traversals."""

from arborql.infrastructure.repositories.tree import TreeRepository

__all__ = ["TreeRepository"]
