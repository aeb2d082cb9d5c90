"""Hierarchy binding: an adjacency-list table plus its column configuration.

:class:`Hierarchy` is the capability every traversal is generic over. It is
built once per table with :meth:`Hierarchy.bind`, which validates the config
against the table's columns, and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from arborql.config.models import CustomPath, HierarchyConfig
from arborql.domain.errors import ConfigurationError, MissingAttributeError

if TYPE_CHECKING:
    from sqlalchemy import Table


@runtime_checkable
class HierarchicalRecord(Protocol):
    """Anything that can describe where the keys of a hierarchy live.

    Query building, traversal and tree materialization only rely on this
    interface; :class:`Hierarchy` is the stock implementation.
    """

    @property
    def table(self) -> Table: ...

    @property
    def config(self) -> HierarchyConfig: ...

    @property
    def name(self) -> str: ...

    @property
    def local_key(self) -> str: ...

    @property
    def parent_key(self) -> str: ...

    @property
    def depth_name(self) -> str: ...

    @property
    def path_name(self) -> str: ...

    @property
    def path_separator(self) -> str: ...

    @property
    def custom_paths(self) -> tuple[CustomPath, ...]: ...

    @property
    def expression_name(self) -> str: ...

    def key_of(self, node: Mapping[str, Any]) -> Any: ...

    def parent_of(self, node: Mapping[str, Any]) -> Any: ...

    def depth_of(self, node: Mapping[str, Any]) -> int: ...

    def path_of(self, node: Mapping[str, Any]) -> Any: ...


@dataclass(frozen=True)
class Hierarchy:
    """A validated (table, config) pair."""

    table: Table
    config: HierarchyConfig
    local_key: str

    @classmethod
    def bind(cls, table: Any, config: HierarchyConfig | None = None) -> Hierarchy:
        """Validate *config* against *table* and return the binding.

        *table* may be a :class:`~sqlalchemy.Table` or a declarative class
        exposing ``__table__``.

        Raises:
            ConfigurationError: If a configured column is missing, the local
                key cannot be inferred, or a depth/path name shadows a column.
        """
        config = config or HierarchyConfig()
        table = getattr(table, "__table__", table)
        columns = set(table.c.keys())

        local_key = config.local_key or _primary_key_name(table)
        required = [config.parent_key, local_key, *(p.column for p in config.custom_paths)]
        missing = [name for name in required if name not in columns]
        if missing:
            msg = f"Table {table.name!r} has no column(s) {sorted(set(missing))}"
            raise ConfigurationError(msg)

        outputs = {config.depth_name, config.path_name, *(p.name for p in config.custom_paths)}
        clashes = outputs & columns
        if clashes:
            msg = (
                f"Depth/path names {sorted(clashes)} clash with columns of "
                f"table {table.name!r}"
            )
            raise ConfigurationError(msg)

        return cls(table=table, config=config, local_key=local_key)

    @property
    def name(self) -> str:
        return str(self.table.name)

    @property
    def parent_key(self) -> str:
        return self.config.parent_key

    @property
    def depth_name(self) -> str:
        return self.config.depth_name

    @property
    def path_name(self) -> str:
        return self.config.path_name

    @property
    def path_separator(self) -> str:
        return self.config.path_separator

    @property
    def custom_paths(self) -> tuple[CustomPath, ...]:
        return self.config.custom_paths

    @property
    def expression_name(self) -> str:
        return self.config.expression_name

    # ------------------------------------------------------------------
    # Node readers
    # ------------------------------------------------------------------

    def key_of(self, node: Mapping[str, Any]) -> Any:
        """Return the node's local key."""
        return _read(node, self.local_key)

    def parent_of(self, node: Mapping[str, Any]) -> Any:
        """Return the node's parent key (``None`` for roots)."""
        return _read(node, self.parent_key)

    def depth_of(self, node: Mapping[str, Any]) -> int:
        """Return the depth a traversal assigned to *node*."""
        return int(_read(node, self.depth_name))

    def path_of(self, node: Mapping[str, Any]) -> Any:
        """Return the raw path value a traversal assigned to *node*."""
        return _read(node, self.path_name)


def _primary_key_name(table: Table) -> str:
    pk = list(table.primary_key.columns)
    if len(pk) != 1:
        msg = (
            f"Table {table.name!r} needs a single-column primary key "
            f"or an explicit local_key (found {len(pk)} key columns)"
        )
        raise ConfigurationError(msg)
    return str(pk[0].key)


def _read(node: Mapping[str, Any], attribute: str) -> Any:
    try:
        return node[attribute]
    except KeyError:
        raise MissingAttributeError(attribute) from None
