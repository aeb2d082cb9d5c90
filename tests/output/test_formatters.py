"""Tests for the format_result dispatcher and tree rendering."""

import json

from arborql.output.console import create_console, get_output
from arborql.output.formatters import format_result, render_tree
from arborql.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERR", message=msg))


_FOREST = [
    {
        "id": 1,
        "name": "root",
        "depth": 0,
        "path": "1",
        "children": [{"id": 2, "name": "child", "depth": 1, "path": "1.2", "children": []}],
    }
]


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(_ok("roots", count=0, items=[]), json_output=True)
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "roots"
        assert data["data"]["items"] == []

    def test_json_error(self) -> None:
        data = json.loads(format_result(_err("ancestors", "gone"), json_output=True))
        assert data["ok"] is False
        assert data["error"]["message"] == "gone"


class TestFormatResultHuman:
    def test_error_line(self) -> None:
        assert format_result(_err("root", "No node")) == "ERROR: root - No node"

    def test_rows(self) -> None:
        output = format_result(
            _ok("descendants", id=1, count=1, items=[{"id": 2, "depth": 1, "path": "1.2"}])
        )
        assert "OK" in output
        assert "depth=1" in output
        assert "1.2" in output
        assert "count: 1" in output

    def test_tree(self) -> None:
        result = ServiceResult(
            ok=True, op="tree", data={"count": 2, "roots": _FOREST}, meta={"relation": "children"}
        )
        output = format_result(result)
        assert output.index("root") < output.index("child")
        assert "count: 2" in output

    def test_sql_printed_verbatim(self) -> None:
        output = format_result(_ok("sql", traversal="tree", sql="SELECT [x] FROM t"))
        assert "SELECT [x] FROM t" in output
        assert "traversal: tree" in output

    def test_markup_in_names_is_escaped(self) -> None:
        output = format_result(_ok("roots", items=[{"id": 1, "name": "[bold]x[/bold]"}]))
        assert "[bold]x[/bold]" in output

    def test_rows_use_hierarchy_column_names(self) -> None:
        result = ServiceResult(
            ok=True,
            op="descendants",
            data={
                "count": 1,
                "items": [{"uuid": "a-2", "level": 1, "trail": "a-1/a-2", "id": 99}],
            },
            meta={"local_key": "uuid", "depth_name": "level", "path_name": "trail"},
        )
        output = format_result(result)
        assert "a-2" in output
        assert "level=1" in output
        assert "a-1/a-2" in output
        assert "99" not in output

    def test_tree_uses_custom_relation_and_names(self) -> None:
        forest = [
            {"uuid": "r", "level": 0, "kids": [{"uuid": "k", "level": 1, "kids": []}]},
        ]
        result = ServiceResult(
            ok=True,
            op="tree",
            data={"count": 2, "roots": forest},
            meta={"local_key": "uuid", "depth_name": "level", "relation": "kids"},
        )
        lines = format_result(result).splitlines()
        assert any("r" in line and "level=0" in line for line in lines)
        assert any("k" in line and "level=1" in line for line in lines)
        assert not any("?" in line for line in lines)


class TestRenderTree:
    def test_nested_levels(self) -> None:
        console = create_console(no_color=True)
        render_tree(console, _FOREST)
        lines = get_output(console).splitlines()
        assert len(lines) == 2
        assert "root" in lines[0]
        assert "child" in lines[1]
        assert lines[1].index("2") > lines[0].index("1")

    def test_names_override_default_keys(self) -> None:
        console = create_console(no_color=True)
        forest = [{"code": "x", "tier": 0, "children": []}]
        names = {"local_key": "code", "depth_name": "tier", "path_name": "p"}
        render_tree(console, forest, names=names)
        assert "x  tier=0" in get_output(console)
