"""Tests for named query scopes."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import sqlite

from arborql.domain.errors import HierarchyError, InvalidOperatorError, UnknownScopeError
from arborql.infrastructure.repositories.tree import TreeRepository
from arborql.infrastructure.sql.query import HierarchyQuery
from arborql.infrastructure.sql.scopes import SCOPES, ScopeRegistry, register_scope
from tests.conftest import ids


class TestRegistry:
    def test_builtin_scopes_registered(self) -> None:
        for name in (
            "tree",
            "tree_of",
            "has_children",
            "has_parent",
            "is_leaf",
            "is_root",
            "where_depth",
            "breadth_first",
            "depth_first",
        ):
            assert name in SCOPES

    def test_unknown_scope(self, repo: TreeRepository) -> None:
        with pytest.raises(UnknownScopeError, match="no_such_scope"):
            repo.query().scope("no_such_scope")

    def test_register_custom_scope(self, repo: TreeRepository) -> None:
        registry = ScopeRegistry()

        @registry.register("named")
        def named(query: HierarchyQuery, name: str) -> HierarchyQuery:
            return query.where(query.c.name == name)

        query = registry.get("named")(repo.query(), "leaf")
        assert ids(repo.all(query)) == [4]
        assert registry.names() == ["named"]

    def test_register_scope_on_default_registry(self, repo: TreeRepository) -> None:
        @register_scope("slug_is")
        def slug_is(query: HierarchyQuery, slug: str) -> HierarchyQuery:
            return query.where(query.c.slug == slug)

        assert ids(repo.all(repo.query().scope("slug_is", "rt"))) == [3]


class TestStructuralFilters:
    def test_is_root(self, forest_repo: TreeRepository) -> None:
        assert sorted(ids(forest_repo.all(forest_repo.query().is_root()))) == [1, 5]

    def test_has_parent(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().has_parent())
        assert sorted(ids(rows)) == [2, 3, 4, 6, 7, 8]

    def test_is_leaf(self, forest_repo: TreeRepository) -> None:
        assert sorted(ids(forest_repo.all(forest_repo.query().is_leaf()))) == [3, 7, 8]

    def test_has_children(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().has_children())
        assert sorted(ids(rows)) == [1, 2, 4, 5, 6]

    def test_leaf_and_children_partition_rows(self, forest_repo: TreeRepository) -> None:
        leaves = set(ids(forest_repo.all(forest_repo.query().is_leaf())))
        inner = set(ids(forest_repo.all(forest_repo.query().has_children())))
        assert not leaves & inner
        assert leaves | inner == set(range(1, 9))

    def test_filters_compose_with_tree(self, forest_repo: TreeRepository) -> None:
        query = forest_repo.query().tree().is_leaf()
        rows = {row["id"]: row for row in forest_repo.all(query)}
        assert set(rows) == {3, 7, 8}
        assert rows[8]["depth"] == 3
        assert rows[8]["path"] == "1.2.4.8"

    def test_child_subquery_targets_base_table(self, repo: TreeRepository) -> None:
        sql = repo.query().tree().has_children().compile(sqlite.dialect())
        assert "FROM nodes AS nodes_child" in sql
        assert "nodes_child.parent_id = arborql_cte.id" in sql


class TestWhereDepth:
    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            ((2,), [4]),
            (("=", 1), [2, 3]),
            (("==", 0), [1]),
            (("!=", 1), [1, 4]),
            (("<>", 0), [2, 3, 4]),
            (("<", 1), [1]),
            (("<=", 1), [1, 2, 3]),
            ((">", 1), [4]),
            ((">=", 1), [2, 3, 4]),
        ],
    )
    def test_operators(self, repo: TreeRepository, args: tuple, expected: list[int]) -> None:
        query = repo.query().tree().where_depth(*args)
        assert sorted(ids(repo.all(query))) == expected

    def test_invalid_operator(self, repo: TreeRepository) -> None:
        with pytest.raises(InvalidOperatorError, match="LIKE"):
            repo.query().tree().where_depth("LIKE", 1)

    def test_requires_recursive_expression(self, repo: TreeRepository) -> None:
        with pytest.raises(HierarchyError, match="depth"):
            repo.query().where_depth(1)


class TestOrdering:
    def test_breadth_first_depths_non_decreasing(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().tree().breadth_first())
        depths = [row["depth"] for row in rows]
        assert depths == sorted(depths)

    def test_depth_first_parents_before_children(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().tree().depth_first())
        paths = [row["path"] for row in rows]
        assert paths == sorted(paths)
        assert ids(rows) == [1, 2, 4, 8, 3, 5, 6, 7]

    def test_depth_first_requires_recursive_expression(self, repo: TreeRepository) -> None:
        with pytest.raises(HierarchyError, match="path"):
            repo.query().depth_first()


class TestTreeScopes:
    def test_tree_returns_every_row(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().tree())
        assert sorted(ids(rows)) == list(range(1, 9))
        assert {row["id"] for row in rows if row["depth"] == 0} == {1, 5}

    def test_tree_max_depth(self, forest_repo: TreeRepository) -> None:
        rows = forest_repo.all(forest_repo.query().tree(2))
        assert max(row["depth"] for row in rows) == 1
        assert sorted(ids(rows)) == [1, 2, 3, 5, 6]

    def test_tree_of_custom_seed(self, forest_repo: TreeRepository) -> None:
        query = forest_repo.query().tree_of(lambda source: source.c.id == 5)
        rows = forest_repo.all(query)
        assert sorted(ids(rows)) == [5, 6, 7]
        assert {row["id"]: row["path"] for row in rows}[7] == "5.6.7"
