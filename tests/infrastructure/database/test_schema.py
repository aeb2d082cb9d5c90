"""Tests for adjacency-list table definitions."""

from sqlalchemy import Column, Integer, MetaData, String

from arborql.infrastructure.database.schema import adjacency_table, metadata, nodes


class TestAdjacencyTable:
    def test_default_nodes_table(self) -> None:
        assert nodes.metadata is metadata
        assert [col.name for col in nodes.primary_key] == ["id"]
        assert nodes.c.parent_id.nullable is True
        assert nodes.c.name.nullable is False
        fk = next(iter(nodes.c.parent_id.foreign_keys))
        assert fk.target_fullname == "nodes.id"

    def test_custom_parent_key_and_key_type(self) -> None:
        meta = MetaData()
        table = adjacency_table(
            "folders", meta, Column("size", Integer), key_type=String(36), parent_key="owner"
        )
        assert set(table.c.keys()) == {"id", "owner", "name", "size"}
        assert isinstance(table.c.id.type, String)
        assert isinstance(table.c.owner.type, String)
        assert next(iter(table.c.owner.foreign_keys)).target_fullname == "folders.id"
        assert {ix.name for ix in table.indexes} == {"ix_folders_owner"}
