"""Traversal direction and path encoding enums."""

from __future__ import annotations

from enum import StrEnum


class Direction(StrEnum):
    """Which way a recursive expression walks the adjacency list."""

    ASCENDING = "asc"  # toward roots
    DESCENDING = "desc"  # toward leaves


class PathEncoding(StrEnum):
    """How the path column is serialized inside the recursive expression."""

    TEXT = "text"
    ARRAY = "array"
