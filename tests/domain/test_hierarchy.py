"""Tests for hierarchy binding and configuration validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import Column, Integer, MetaData, Table, Text

from arborql.config.models import CustomPath, HierarchyConfig
from arborql.domain.errors import ConfigurationError, MissingAttributeError
from arborql.domain.hierarchy import HierarchicalRecord, Hierarchy
from arborql.infrastructure.database.schema import adjacency_table, nodes


class TestBind:
    def test_defaults_from_primary_key(self) -> None:
        h = Hierarchy.bind(nodes)
        assert h.local_key == "id"
        assert h.parent_key == "parent_id"
        assert h.depth_name == "depth"
        assert h.path_name == "path"
        assert h.path_separator == "."
        assert h.expression_name == "arborql_cte"
        assert h.name == "nodes"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(Hierarchy.bind(nodes), HierarchicalRecord)

    def test_accepts_declarative_style_object(self) -> None:
        class Mapped:
            __table__ = nodes

        assert Hierarchy.bind(Mapped).table is nodes

    def test_custom_parent_key(self) -> None:
        table = adjacency_table("categories", MetaData(), parent_key="owner_id")
        h = Hierarchy.bind(table, HierarchyConfig(parent_key="owner_id"))
        assert h.parent_key == "owner_id"

    def test_missing_parent_column(self) -> None:
        with pytest.raises(ConfigurationError, match="owner_id"):
            Hierarchy.bind(nodes, HierarchyConfig(parent_key="owner_id"))

    def test_missing_custom_path_column(self) -> None:
        config = HierarchyConfig(custom_paths=(CustomPath(column="title", name="titles"),))
        with pytest.raises(ConfigurationError, match="title"):
            Hierarchy.bind(nodes, config)

    def test_output_name_clashing_with_column(self) -> None:
        with pytest.raises(ConfigurationError, match="clash"):
            Hierarchy.bind(nodes, HierarchyConfig(path_name="slug"))

    def test_composite_primary_key_needs_local_key(self) -> None:
        table = Table(
            "pairs",
            MetaData(),
            Column("a", Integer, primary_key=True),
            Column("b", Integer, primary_key=True),
            Column("parent_id", Integer),
        )
        with pytest.raises(ConfigurationError, match="single-column primary key"):
            Hierarchy.bind(table)
        assert Hierarchy.bind(table, HierarchyConfig(local_key="a")).local_key == "a"

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Hierarchy.bind(nodes, HierarchyConfig(parent_key="nope"))


class TestConfigModel:
    def test_frozen(self) -> None:
        config = HierarchyConfig()
        with pytest.raises(ValidationError):
            config.path_separator = "/"  # type: ignore[misc]

    def test_duplicate_output_names_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HierarchyConfig(depth_name="path")

    def test_empty_separator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HierarchyConfig(path_separator="")


class TestNodeReaders:
    def test_reads_keys(self) -> None:
        h = Hierarchy.bind(nodes)
        node = {"id": 4, "parent_id": 2, "depth": 2, "path": "1.2.4"}
        assert h.key_of(node) == 4
        assert h.parent_of(node) == 2
        assert h.depth_of(node) == 2
        assert h.path_of(node) == "1.2.4"

    def test_missing_attribute(self) -> None:
        h = Hierarchy.bind(nodes)
        with pytest.raises(MissingAttributeError) as exc_info:
            h.parent_of({"id": 1})
        assert exc_info.value.attribute == "parent_id"
        assert isinstance(exc_info.value, KeyError)

    def test_text_column_table(self) -> None:
        table = adjacency_table("paths", MetaData(), key_type=Text)
        assert Hierarchy.bind(table).local_key == "id"
