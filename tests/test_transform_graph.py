"""
Tests for SceneGraph and TransformNode.

Covers cache invalidation, hierarchy bookkeeping and world-space queries.
"""

import logging
import math

import numpy as np
import pytest

from vectormaths import Mat4, MatrixCache, Quaternion, SceneGraph, TransformNode, Vec3

QUARTER_Z = Quaternion.from_axis_angle(Vec3.unit_z(), math.pi / 2)
QUARTER_X = Quaternion.from_axis_angle(Vec3.unit_x(), math.pi / 2)


@pytest.fixture
def graph():
    return SceneGraph()


@pytest.fixture
def chain(graph):
    """root -> child -> grandchild, each offset along +X."""
    root = graph.create_node(position=Vec3(10, 0, 0), name="root")
    child = graph.create_node(position=Vec3(5, 0, 0), name="child")
    grandchild = graph.create_node(position=Vec3(1, 0, 0), name="grandchild")
    root.add_child(child)
    child.add_child(grandchild)
    return root, child, grandchild


# ============================================================================
# Local matrix cache
# ============================================================================


class TestLocalMatrix:
    """Test lazy local matrix computation."""

    def test_new_node_is_dirty(self, graph):
        node = graph.create_node()
        assert node.is_dirty

    def test_defaults(self, graph):
        node = graph.create_node()
        assert node.position == Vec3.zero()
        assert node.rotation == Quaternion.identity()
        assert node.scale == Vec3.one()
        assert node.get_local_matrix() == Mat4.identity()

    def test_get_local_matrix_cleans_and_caches(self, graph):
        node = graph.create_node(position=Vec3(1, 2, 3))
        first = node.get_local_matrix()

        assert not node.is_dirty
        assert node.get_local_matrix() is first

    def test_local_matrix_is_trs(self, graph):
        node = graph.create_node(
            position=Vec3(1, 2, 3), rotation=QUARTER_Z, scale=Vec3(2, 2, 2)
        )
        # Scale, then rotate, then translate
        assert node.get_local_matrix().transform_point(Vec3(1, 0, 0)) == Vec3(1, 4, 3)

        expected = (
            Mat4.identity()
            .translation(Vec3(1, 2, 3))
            .rotate_local(QUARTER_Z)
            .scale(Vec3(2, 2, 2))
        )
        assert node.get_local_matrix() == expected

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda n: n.set_position(Vec3(1, 0, 0)),
            lambda n: n.set_rotation(QUARTER_X),
            lambda n: n.set_scale(Vec3(3, 3, 3)),
            lambda n: n.translate(Vec3(0, 1, 0)),
            lambda n: n.rotate(QUARTER_Z),
            lambda n: n.look_at(Vec3(0, 0, -5)),
            lambda n: n.mark_dirty(),
        ],
    )
    def test_mutations_mark_dirty(self, graph, mutate):
        node = graph.create_node()
        node.get_local_matrix()

        mutate(node)

        assert node.is_dirty

    def test_matrix_cache_dataclass(self):
        cache = MatrixCache()
        assert not cache.valid
        assert cache.matrix == Mat4.identity()

        m = Mat4().translation(Vec3(1, 1, 1))
        assert cache.store(m) is m
        assert cache.valid

        cache.invalidate()
        assert not cache.valid


# ============================================================================
# Dirty propagation and world matrices
# ============================================================================


class TestHierarchy:
    """Test world transforms through the hierarchy."""

    def test_child_world_position(self, graph):
        parent = graph.create_node(position=Vec3(10, 0, 0))
        child = graph.create_node(position=Vec3(5, 0, 0))
        parent.add_child(child)

        assert child.world_position() == Vec3(15, 0, 0)

    def test_world_is_parent_world_times_local(self, chain):
        root, child, grandchild = chain
        root.set_rotation(QUARTER_Z)
        child.set_scale(Vec3(2, 1, 1))

        assert child.get_world_matrix() == root.get_world_matrix() * child.get_local_matrix()
        assert grandchild.get_world_matrix() == (
            root.get_local_matrix() * child.get_local_matrix() * grandchild.get_local_matrix()
        )

    def test_parent_rotation_moves_child(self, chain):
        root, child, grandchild = chain
        root.rotate(QUARTER_Z)

        assert child.world_position() == Vec3(10, 5, 0)
        assert grandchild.world_position() == Vec3(10, 6, 0)

    def test_dirty_propagates_to_descendants(self, chain):
        root, child, grandchild = chain
        for node in chain:
            node.get_local_matrix()
        assert not any(node.is_dirty for node in chain)

        root.set_position(Vec3(0, 0, 0))

        assert root.is_dirty
        assert child.is_dirty
        assert grandchild.is_dirty

    def test_dirty_does_not_propagate_upwards(self, chain):
        root, child, grandchild = chain
        for node in chain:
            node.get_local_matrix()

        child.set_position(Vec3(0, 1, 0))

        assert not root.is_dirty
        assert child.is_dirty
        assert grandchild.is_dirty

    def test_world_matrix_reflects_parent_change(self, chain):
        root, child, _ = chain
        assert child.world_position() == Vec3(15, 0, 0)

        root.set_position(Vec3(0, 0, 0))

        assert child.world_position() == Vec3(5, 0, 0)

    def test_deep_chain_world_matrix(self, graph):
        depth = 2000
        root = graph.create_node(position=Vec3(1, 0, 0))
        leaf = root
        for _ in range(depth - 1):
            node = graph.create_node(position=Vec3(1, 0, 0))
            leaf.add_child(node)
            leaf = node

        assert leaf.world_position() == Vec3(depth, 0, 0)

        root.set_position(Vec3(0, 0, 0))
        assert leaf.is_dirty
        assert leaf.world_position() == Vec3(depth - 1, 0, 0)

    def test_iter_descendants_preorder(self, graph, chain):
        root, child, grandchild = chain
        sibling = graph.create_node(name="sibling")
        root.add_child(sibling)

        assert list(root.iter_descendants()) == [child, grandchild, sibling]
        assert list(grandchild.iter_descendants()) == []


# ============================================================================
# Structure
# ============================================================================


class TestStructure:
    """Test parent/child bookkeeping."""

    def test_add_child_links_both_ways(self, graph):
        parent = graph.create_node()
        child = graph.create_node()
        parent.add_child(child)

        assert child.parent is parent
        assert parent.children == [child]

    def test_set_parent_is_equivalent_to_add_child(self, graph):
        parent = graph.create_node()
        child = graph.create_node()
        child.set_parent(parent)

        assert child.parent is parent
        assert parent.children == [child]

    def test_reparent_removes_from_old_parent(self, graph):
        a = graph.create_node(name="a")
        b = graph.create_node(name="b")
        c = graph.create_node(name="c")

        a.add_child(c)
        b.add_child(c)

        assert c.parent is b
        assert a.children == []
        assert b.children == [c]

    def test_reparent_marks_dirty(self, graph):
        a = graph.create_node(position=Vec3(1, 0, 0))
        c = graph.create_node()
        c.get_local_matrix()

        c.set_parent(a)

        assert c.is_dirty
        assert c.world_position() == Vec3(1, 0, 0)

    def test_set_parent_none_detaches(self, chain, graph):
        root, child, _ = chain
        child.set_parent(None)

        assert child.parent is None
        assert root.children == []
        assert child in graph.roots()

    def test_same_parent_keeps_order(self, graph):
        parent = graph.create_node()
        first = graph.create_node()
        second = graph.create_node()
        parent.add_child(first)
        parent.add_child(second)

        parent.add_child(first)

        assert parent.children == [first, second]

    def test_cycle_is_rejected(self, chain):
        root, child, grandchild = chain

        with pytest.raises(ValueError, match="cycle"):
            grandchild.add_child(root)
        with pytest.raises(ValueError, match="cycle"):
            child.set_parent(child)

        # Nothing changed
        assert root.parent is None
        assert grandchild.children == []

    def test_remove_child(self, chain):
        root, child, _ = chain
        root.remove_child(child)

        assert child.parent is None
        assert root.children == []

    def test_remove_non_child_is_noop(self, chain):
        root, child, grandchild = chain
        root.remove_child(grandchild)

        assert grandchild.parent is child
        assert child.children == [grandchild]

    def test_non_node_arguments(self, graph):
        node = graph.create_node()

        with pytest.raises(TypeError, match="TransformNode"):
            node.add_child("not a node")
        with pytest.raises(TypeError, match="parent must be TransformNode"):
            node.set_parent(42)
        with pytest.raises(TypeError, match="child must be TransformNode"):
            node.remove_child(None)
        with pytest.raises(TypeError, match="Pass a TransformNode or None"):
            graph.set_parent(node, "root")

    def test_nodes_from_other_graph(self, graph):
        other = SceneGraph()
        a = graph.create_node()
        b = other.create_node()

        with pytest.raises(ValueError, match="different SceneGraph"):
            a.add_child(b)


class TestSceneGraph:
    """Test arena bookkeeping and node destruction."""

    def test_handles_and_lookup(self, graph):
        a = graph.create_node(name="a")
        b = graph.create_node(name="b")

        assert a.handle != b.handle
        assert graph[a.handle] is a
        assert len(graph) == 2
        assert a.handle in graph
        assert b in graph
        assert list(graph) == [a, b]

    def test_missing_handle(self, graph):
        with pytest.raises(KeyError):
            graph[123]

    def test_roots(self, chain, graph):
        root, _, _ = chain
        loose = graph.create_node()
        assert graph.roots() == [root, loose]

    def test_destroy_orphans_children(self, chain, graph):
        root, child, grandchild = chain
        graph.destroy_node(child)

        assert child not in graph
        assert child.handle not in graph
        assert not child.alive
        assert root.children == []
        assert grandchild.parent is None
        assert len(graph) == 2

    def test_destroy_reparents_children(self, chain, graph):
        root, child, grandchild = chain
        graph.destroy_node(child, reparent_children=True)

        assert grandchild.parent is root
        assert root.children == [grandchild]
        assert grandchild.world_position() == Vec3(11, 0, 0)

    def test_destroyed_node_raises(self, chain, graph):
        root, child, _ = chain
        graph.destroy_node(child)

        with pytest.raises(ValueError, match="destroyed"):
            child.set_position(Vec3.zero())
        with pytest.raises(ValueError, match="destroyed"):
            child.get_world_matrix()
        with pytest.raises(ValueError, match="destroyed"):
            root.add_child(child)
        with pytest.raises(ValueError, match="destroyed"):
            graph.destroy_node(child)

    def test_handles_are_not_reused(self, graph):
        a = graph.create_node()
        graph.destroy_node(a)
        b = graph.create_node()
        assert b.handle != a.handle

    def test_structure_changes_are_logged(self, graph, caplog):
        with caplog.at_level(logging.DEBUG, logger="vectormaths.transform"):
            parent = graph.create_node(name="parent")
            child = graph.create_node(name="child")
            parent.add_child(child)
            graph.destroy_node(child)

        assert "[SceneGraph] Created node" in caplog.text
        assert "[SceneGraph] Destroyed node" in caplog.text


# ============================================================================
# Orientation
# ============================================================================


class TestOrientation:
    """Test rotate, look_at and direction vectors."""

    def test_default_directions(self, graph):
        node = graph.create_node()
        assert node.forward() == Vec3(0, 0, -1)
        assert node.right() == Vec3(1, 0, 0)
        assert node.up() == Vec3(0, 1, 0)

    def test_rotate_local_and_parent_space(self, graph):
        local = graph.create_node(rotation=QUARTER_Z)
        parent_space = graph.create_node(rotation=QUARTER_Z)

        local.rotate(QUARTER_X)
        parent_space.rotate(QUARTER_X, local=False)

        assert local.rotation == QUARTER_Z * QUARTER_X
        assert parent_space.rotation == QUARTER_X * QUARTER_Z
        assert local.rotation != parent_space.rotation

    def test_look_at_points_forward_at_target(self, graph):
        node = graph.create_node()
        node.look_at(Vec3(10, 0, 0))

        assert node.forward() == Vec3(1, 0, 0)
        assert node.up() == Vec3(0, 1, 0)
        assert node.right() == Vec3(0, 0, 1)

    def test_look_at_down_negative_z_is_identity(self, graph):
        node = graph.create_node(position=Vec3(0, 0, 5))
        node.look_at(Vec3.zero())

        assert node.rotation == Quaternion.identity()

    def test_look_at_same_position_is_noop(self, graph):
        node = graph.create_node(position=Vec3(1, 2, 3), rotation=QUARTER_X)
        node.get_local_matrix()

        node.look_at(Vec3(1, 2, 3))

        assert node.rotation == QUARTER_X
        assert not node.is_dirty

    def test_look_at_parallel_up(self, graph):
        node = graph.create_node()
        node.look_at(Vec3(0, 10, 0))

        forward = node.forward()
        assert not any(math.isnan(c) for c in forward)
        assert forward == Vec3(0, 1, 0)
        assert node.rotation.length() == pytest.approx(1.0)

    def test_look_at_matches_view_matrix(self, graph):
        eye = Vec3(3, 4, 5)
        target = Vec3(-1, 0, 2)
        node = graph.create_node(position=eye)
        node.look_at(target)

        view = Mat4.look_at(eye, target, Vec3.unit_y())
        np.testing.assert_allclose(
            node.get_world_matrix().inverse().to_numpy(), view.to_numpy(), atol=1e-9
        )

    @pytest.mark.parametrize(
        "eye, target",
        [
            (Vec3(0, 5, 0), Vec3(0, 0, 0)),
            (Vec3(2, -7, 1), Vec3(2, 3, 1)),
        ],
    )
    def test_look_at_parallel_up_matches_view_matrix(self, graph, eye, target):
        node = graph.create_node(position=eye)
        node.look_at(target, Vec3.unit_y())

        view = Mat4.look_at(eye, target, Vec3.unit_y())
        assert view.determinant() == pytest.approx(1.0)
        np.testing.assert_allclose(
            node.get_world_matrix().inverse().to_numpy(), view.to_numpy(), atol=1e-9
        )

    def test_repr(self, graph):
        node = graph.create_node(name="camera")
        assert "camera" in repr(node)
        assert "dirty" in repr(node)
        assert isinstance(node, TransformNode)
