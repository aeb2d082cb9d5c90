"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, arborql.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from arborql.domain.types import PathEncoding


class CustomPath(BaseModel):
    """An extra path accumulated over a column other than the local key."""

    model_config = {"frozen": True}

    column: str
    name: str
    separator: str = Field(default=".", min_length=1)


class HierarchyConfig(BaseModel):
    """Column naming and path settings for one adjacency-list table.

    ``local_key`` defaults to the table's primary key once the config is
    bound with :meth:`arborql.domain.hierarchy.Hierarchy.bind`.
    """

    model_config = {"frozen": True}

    parent_key: str = "parent_id"
    local_key: str | None = None
    depth_name: str = "depth"
    path_name: str = "path"
    path_separator: str = Field(default=".", min_length=1)
    path_encoding: PathEncoding = PathEncoding.TEXT
    custom_paths: tuple[CustomPath, ...] = ()
    expression_name: str = Field(default="arborql_cte", min_length=1)
    cycle_guard: bool = False
    children_relation: str = "children"

    @model_validator(mode="after")
    def _unique_output_names(self) -> HierarchyConfig:
        names = [self.depth_name, self.path_name, *(p.name for p in self.custom_paths)]
        if len(set(names)) != len(names):
            msg = f"Depth and path column names must be distinct, got {names}"
            raise ValueError(msg)
        return self


# --- arborql.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite:///arborql.db"
    echo: bool = False


class HierarchySettings(HierarchyConfig):
    """[hierarchy] section: the table to traverse plus its column config."""

    table: str = "nodes"

    def to_config(self) -> HierarchyConfig:
        """Drop the table name, keeping only the hierarchy column config."""
        return HierarchyConfig.model_validate(self.model_dump(exclude={"table"}))
