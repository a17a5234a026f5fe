from __future__ import annotations

"""
Unit tests for tree items and their owning collections.
"""

import pytest

from gotestexplorer.core.explorer.registry import ItemRegistry
from gotestexplorer.domain.errors import InvalidItemIdError, TreeConsistencyError
from gotestexplorer.domain.identity import test_id


@pytest.fixture
def registry() -> ItemRegistry:
    return ItemRegistry()


def test_create_node_derives_kind_and_name(registry):
    item = registry.create_node(test_id("/p/a_test.go", "benchmark", "BenchmarkX"), "BenchmarkX", "/p/a_test.go")

    assert item.kind == "benchmark"
    assert item.name == "BenchmarkX"
    assert item.is_leaf
    assert not item.can_resolve_children


def test_create_node_rejects_foreign_ids(registry):
    with pytest.raises(InvalidItemIdError):
        registry.create_node("not-an-id", "x", "/p")


def test_collection_preserves_insertion_order(registry):
    root = registry.create_node(test_id("/p", "module"), "m", "/p")
    registry.items.add(root)
    for name in ("zeta", "alpha", "mid"):
        root.children.add(registry.create_node(test_id(f"/p/{name}", "package"), name, f"/p/{name}"))

    assert [c.label for c in root.children] == ["zeta", "alpha", "mid"]
    assert len(root.children) == 3


def test_add_sets_parent_and_delete_clears_it(registry):
    root = registry.items.add(registry.create_node(test_id("/p", "module"), "m", "/p"))
    child = root.children.add(registry.create_node(test_id("/p/a_test.go", "file"), "a_test.go", "/p/a_test.go"))

    assert child.parent is root
    assert registry.is_attached(child)

    root.children.delete(child.id)
    assert child.parent is None
    assert not registry.is_attached(child)


def test_reparenting_is_refused(registry):
    a = registry.items.add(registry.create_node(test_id("/a", "module"), "a", "/a"))
    b = registry.items.add(registry.create_node(test_id("/b", "module"), "b", "/b"))
    f = a.children.add(registry.create_node(test_id("/a/x_test.go", "file"), "x", "/a/x_test.go"))

    with pytest.raises(TreeConsistencyError):
        b.children.add(f)


def test_duplicate_id_is_refused(registry):
    item_id = test_id("/a", "module")
    registry.items.add(registry.create_node(item_id, "a", "/a"))

    with pytest.raises(TreeConsistencyError):
        registry.items.add(registry.create_node(item_id, "a", "/a"))


def test_adding_the_same_instance_twice_is_a_noop(registry):
    item = registry.create_node(test_id("/a", "module"), "a", "/a")
    registry.items.add(item)
    registry.items.add(item)
    assert registry.items.ids() == [item.id]
