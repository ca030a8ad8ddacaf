"""Tests for operation scopes and context snapshots."""

from __future__ import annotations

import asyncio
import threading

import pytest

from errata import ops
from errata.context import merge, normalize_key, snapshot


class TestOperations:
    """Tests for begin/set/end."""

    def test_begin_sets_op_name(self) -> None:
        op = ops.begin("load").set("user", "alice")
        try:
            assert ops.as_map() == {"op": "load", "user": "alice"}
        finally:
            op.end()
        assert ops.as_map() == {}

    def test_nested_scopes_inherit_and_override(self) -> None:
        with ops.begin("outer").set("a", 1).set("b", 1):
            with ops.begin("inner").set("b", 2):
                values = ops.as_map()
            after_inner = ops.as_map()

        assert values == {"op": "inner", "root_op": "outer", "a": 1, "b": 2}
        assert after_inner == {"op": "outer", "a": 1, "b": 1}

    def test_root_op_is_outermost(self) -> None:
        with ops.begin("one"), ops.begin("two"), ops.begin("three"):
            assert ops.as_map()["root_op"] == "one"

    def test_end_twice_is_harmless(self) -> None:
        op = ops.begin("once")
        op.end()
        op.end()
        assert ops.as_map() == {}

    def test_end_out_of_order(self) -> None:
        """Test that ending an outer scope first does not resurrect it."""
        a = ops.begin("a").set("from_a", 1)
        b = ops.begin("b").set("from_b", 2)

        a.end()
        assert ops.as_map() == {"op": "b", "root_op": "a", "from_b": 2}

        b.end()
        assert ops.as_map() == {}

    def test_globals_have_lowest_precedence(self) -> None:
        ops.set_global("region", "eu")
        ops.set_global("service", "api")
        with ops.begin("req").set("region", "us"):
            values = ops.as_map()

        assert values["region"] == "us"
        assert values["service"] == "api"

        ops.clear_global("service")
        assert ops.as_map() == {"region": "eu"}


def test_scopes_do_not_leak_across_threads() -> None:
    seen: dict[str, dict] = {}

    def worker() -> None:
        ops.begin("worker").set("x", 2)
        seen["thread"] = ops.as_map()

    with ops.begin("main").set("x", 1):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        main_view = ops.as_map()

    assert seen["thread"]["op"] == "worker"
    assert seen["thread"]["x"] == 2
    assert main_view == {"op": "main", "x": 1}


@pytest.mark.asyncio
async def test_scopes_are_task_local() -> None:
    """Tasks inherit the creating scope but do not leak their own."""

    async def child(name: str) -> dict:
        with ops.begin(name).set("child", name):
            await asyncio.sleep(0)
            return ops.as_map()

    with ops.begin("parent").set("p", True):
        first, second = await asyncio.gather(child("a"), child("b"))
        parent_view = ops.as_map()

    assert first["child"] == "a" and first["p"] is True
    assert second["child"] == "b" and second["root_op"] == "parent"
    assert "child" not in parent_view


@pytest.mark.asyncio
async def test_end_in_another_task() -> None:
    """Test that a task ending an inherited scope affects only itself."""
    op = ops.begin("shared")

    async def finish() -> dict:
        op.end()
        return ops.as_map()

    try:
        in_task = await asyncio.create_task(finish())
        assert in_task == {}
        assert ops.as_map() == {"op": "shared"}
    finally:
        op.end()
    assert ops.as_map() == {}


class TestSnapshot:
    """Tests for key normalization and merging."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("DaTa_1", "data_1"),
            ("dATA+1", "data_1"),
            ("User Id", "user_id"),
            ("--trimmed--", "trimmed"),
            ("!!!", "_"),
            ("Ключ Доступа", "ключ_доступа"),
            ("STRASSE", "strasse"),
        ],
    )
    def test_normalize_key(self, key: str, expected: str) -> None:
        assert normalize_key(key) == expected

    def test_merge_later_layers_win(self) -> None:
        merged = merge({"A": 1, "b": 1}, None, {"a": 2})
        assert merged == {"a": 2, "b": 1}

    def test_snapshot_is_a_copy(self) -> None:
        op = ops.begin("work").set("Step", 1)
        taken = snapshot({"extra": True})
        op.set("Step", 2)
        op.end()

        assert taken == {"op": "work", "step": 1, "extra": True}
