"""
Hierarchical transform nodes with lazily cached local matrices.

Nodes live in a ``SceneGraph`` arena and refer to each other by integer
handle: a node stores its parent's handle (or None) and the handles of its
children. Every structural change goes through the graph, so the parent and
children links always agree and the hierarchy stays a tree.

Cache model:
- Each node caches its local matrix (T * R * S) in a ``MatrixCache``.
- Any change to position/rotation/scale or to the parent link marks the node
  and all of its descendants dirty.
- ``get_world_matrix`` is recomputed on every call by walking to the root.

Example:
    >>> graph = SceneGraph()
    >>> parent = graph.create_node(position=Vec3(10, 0, 0))
    >>> child = graph.create_node(position=Vec3(5, 0, 0))
    >>> parent.add_child(child)
    >>> child.world_position()
    Vec3(x=15.0, y=0.0, z=0.0)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias

from vectormaths.constants import (
    DEGENERATE_EPSILON,
    FORWARD_AXIS,
    RIGHT_AXIS,
    UP_AXIS,
)
from vectormaths.matrix import Mat3, Mat4, look_basis
from vectormaths.quaternion import Quaternion
from vectormaths.validators import validate_type
from vectormaths.vector import Vec3

logger = logging.getLogger(__name__)

Handle: TypeAlias = int


@dataclass
class MatrixCache:
    """Cached local matrix and whether it is still current."""

    matrix: Mat4 = field(default_factory=Mat4)
    valid: bool = False

    def store(self, matrix: Mat4) -> Mat4:
        self.matrix = matrix
        self.valid = True
        return matrix

    def invalidate(self) -> None:
        self.valid = False


class TransformNode:
    """
    Position, rotation and scale of one object, relative to its parent.

    Create nodes with ``SceneGraph.create_node``; a node always belongs to
    exactly one graph. Once destroyed, every method raises ValueError.
    """

    def __init__(
        self,
        graph: SceneGraph,
        handle: Handle,
        position: Vec3,
        rotation: Quaternion,
        scale: Vec3,
        name: str = "",
    ):
        self._graph = graph
        self._handle = handle
        self.name = name

        self._position = position
        self._rotation = rotation
        self._scale = scale

        self._parent: Handle | None = None
        self._children: list[Handle] = []
        self._cache = MatrixCache()
        self._alive = True

    # -------------------------------------------------------------------------
    # Identity and hierarchy
    # -------------------------------------------------------------------------

    @property
    def handle(self) -> Handle:
        return self._handle

    @property
    def graph(self) -> SceneGraph:
        return self._graph

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def parent(self) -> TransformNode | None:
        self._ensure_alive()
        if self._parent is None:
            return None
        return self._graph[self._parent]

    @property
    def children(self) -> list[TransformNode]:
        """Snapshot of the children, in insertion order."""
        self._ensure_alive()
        return [self._graph[h] for h in self._children]

    def iter_descendants(self) -> Iterator[TransformNode]:
        """Depth-first pre-order walk of the subtree, excluding this node."""
        self._ensure_alive()
        stack = list(reversed(self._children))
        while stack:
            node = self._graph[stack.pop()]
            yield node
            stack.extend(reversed(node._children))

    def set_parent(self, parent: TransformNode | None) -> None:
        """Attach under ``parent`` (None detaches). See ``SceneGraph.set_parent``."""
        self._graph.set_parent(self, parent)

    def add_child(self, child: TransformNode) -> None:
        self._graph.set_parent(child, self)

    def remove_child(self, child: TransformNode) -> None:
        self._graph.remove_child(self, child)

    # -------------------------------------------------------------------------
    # Local fields
    # -------------------------------------------------------------------------

    @property
    def position(self) -> Vec3:
        return self._position

    @property
    def rotation(self) -> Quaternion:
        return self._rotation

    @property
    def scale(self) -> Vec3:
        return self._scale

    def set_position(self, position: Vec3) -> None:
        self._ensure_alive()
        self._position = position
        self.mark_dirty()

    def set_rotation(self, rotation: Quaternion) -> None:
        self._ensure_alive()
        self._rotation = rotation
        self.mark_dirty()

    def set_scale(self, scale: Vec3) -> None:
        self._ensure_alive()
        self._scale = scale
        self.mark_dirty()

    def translate(self, offset: Vec3) -> None:
        self.set_position(self._position + offset)

    def rotate(self, rotation: Quaternion, local: bool = True) -> None:
        """
        Compose ``rotation`` with the current rotation.

        Args:
            rotation: Rotation to apply
            local: True rotates about the node's own axes (``current * q``);
                False rotates about the parent's axes (``q * current``)
        """
        if local:
            self.set_rotation((self._rotation * rotation).normalised())
        else:
            self.set_rotation((rotation * self._rotation).normalised())

    def look_at(self, target: Vec3, up: Vec3 | None = None) -> None:
        """
        Orient the node so ``forward()`` points at ``target``.

        A target at the node's own position leaves the rotation untouched.
        When ``up`` is parallel to the viewing direction the world axis least
        aligned with the direction is used instead.
        """
        self._ensure_alive()
        if up is None:
            up = Vec3(*UP_AXIS)

        direction = target - self._position
        if direction.length() < DEGENERATE_EPSILON:
            logger.debug("[TransformNode] look_at target equals position, rotation unchanged")
            return

        right, new_up, back = look_basis(-direction.normalised(), up)

        # Columns: right, up, back (forward is -Z)
        basis = Mat3.from_rows(
            [
                [right.x, new_up.x, back.x],
                [right.y, new_up.y, back.y],
                [right.z, new_up.z, back.z],
            ]
        )
        self.set_rotation(Quaternion.from_rotation_matrix(basis))

    def forward(self) -> Vec3:
        return self._rotation.rotate_vector(Vec3(*FORWARD_AXIS))

    def right(self) -> Vec3:
        return self._rotation.rotate_vector(Vec3(*RIGHT_AXIS))

    def up(self) -> Vec3:
        return self._rotation.rotate_vector(Vec3(*UP_AXIS))

    # -------------------------------------------------------------------------
    # Matrices
    # -------------------------------------------------------------------------

    @property
    def is_dirty(self) -> bool:
        return not self._cache.valid

    def mark_dirty(self) -> None:
        """Invalidate the cached local matrix of this node and every descendant."""
        self._ensure_alive()
        self._cache.invalidate()
        for node in self.iter_descendants():
            node._cache.invalidate()

    def get_local_matrix(self) -> Mat4:
        """Local matrix T * R * S, recomputed only when dirty."""
        self._ensure_alive()
        if self._cache.valid:
            return self._cache.matrix

        matrix = (
            Mat4.identity()
            .translation(self._position)
            .rotate_local(self._rotation)
            .scale(self._scale)
        )
        return self._cache.store(matrix)

    def get_world_matrix(self) -> Mat4:
        """
        Parent world matrix times local matrix, up to the root.

        Walks the parent handles iteratively, so hierarchy depth is not
        limited by the interpreter's recursion limit. Only local matrices
        are cached; the product is recomputed on every call.
        """
        chain = [self]
        parent = self.parent
        while parent is not None:
            chain.append(parent)
            parent = parent.parent

        matrix = chain.pop().get_local_matrix()
        while chain:
            matrix = matrix * chain.pop().get_local_matrix()
        return matrix

    def world_position(self) -> Vec3:
        return self.get_world_matrix().transform_point(Vec3.zero())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _ensure_alive(self) -> None:
        if not self._alive:
            raise ValueError(
                f"TransformNode {self._handle} ({self.name!r}) has been destroyed. "
                f"Create a new node with SceneGraph.create_node()."
            )

    def __repr__(self) -> str:
        state = "destroyed" if not self._alive else ("dirty" if self.is_dirty else "clean")
        return (
            f"TransformNode(handle={self._handle}, name={self.name!r}, "
            f"position={self._position!r}, parent={self._parent}, {state})"
        )


class SceneGraph:
    """
    Arena owning a forest of TransformNodes, addressed by integer handle.

    Handles are never reused, so a stale handle of a destroyed node cannot
    silently refer to a newer node.
    """

    def __init__(self):
        self._nodes: dict[Handle, TransformNode] = {}
        self._next_handle: Handle = 0

    def create_node(
        self,
        position: Vec3 | None = None,
        rotation: Quaternion | None = None,
        scale: Vec3 | None = None,
        name: str = "",
    ) -> TransformNode:
        """Create a dirty root node (defaults: origin, identity, unit scale)."""
        handle = self._next_handle
        self._next_handle += 1

        node = TransformNode(
            self,
            handle,
            position if position is not None else Vec3.zero(),
            rotation if rotation is not None else Quaternion.identity(),
            scale if scale is not None else Vec3.one(),
            name,
        )
        self._nodes[handle] = node
        logger.debug("[SceneGraph] Created node %d %r", handle, name)
        return node

    def __getitem__(self, handle: Handle) -> TransformNode:
        try:
            return self._nodes[handle]
        except KeyError:
            raise KeyError(f"No live node with handle {handle}") from None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, TransformNode):
            return item.graph is self and self._nodes.get(item.handle) is item
        return item in self._nodes

    def __iter__(self) -> Iterator[TransformNode]:
        return iter(list(self._nodes.values()))

    def roots(self) -> list[TransformNode]:
        """Nodes without a parent, in creation order."""
        return [node for node in self._nodes.values() if node._parent is None]

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @validate_type(TransformNode, "node", 1)
    @validate_type(TransformNode, "parent", 2, allow_none=True)
    def set_parent(self, node: TransformNode, parent: TransformNode | None) -> None:
        """
        Move ``node`` under ``parent`` in one step.

        Removes the node from its previous parent's children, appends it to
        the new parent's children, updates the parent link and marks the
        subtree dirty. ``parent=None`` makes the node a root.

        Raises:
            ValueError: If a node is destroyed or foreign to this graph, or if
                the move would make ``node`` its own ancestor
        """
        self._require_member(node)
        if parent is not None:
            self._require_member(parent)
            ancestor: TransformNode | None = parent
            while ancestor is not None:
                if ancestor is node:
                    raise ValueError(
                        f"Cannot parent node {node.handle} under {parent.handle}: "
                        f"the hierarchy would contain a cycle"
                    )
                ancestor = ancestor.parent

        new_handle = parent.handle if parent is not None else None
        if node._parent != new_handle:
            if node._parent is not None:
                self._nodes[node._parent]._children.remove(node.handle)
            node._parent = new_handle
            if parent is not None:
                parent._children.append(node.handle)
            logger.debug("[SceneGraph] Node %d parent -> %s", node.handle, new_handle)

        node.mark_dirty()

    @validate_type(TransformNode, "parent", 1)
    @validate_type(TransformNode, "child", 2)
    def remove_child(self, parent: TransformNode, child: TransformNode) -> None:
        """
        Remove ``child`` from ``parent``'s children.

        The child's parent link is cleared only if it points at ``parent``.
        Removing a node that is not a child is a no-op.
        """
        self._require_member(parent)
        self._require_member(child)

        if child.handle in parent._children:
            parent._children.remove(child.handle)
        if child._parent == parent.handle:
            child._parent = None
            child.mark_dirty()
            logger.debug("[SceneGraph] Node %d detached from %d", child.handle, parent.handle)

    @validate_type(TransformNode, "node", 1)
    def destroy_node(self, node: TransformNode, reparent_children: bool = False) -> None:
        """
        Remove ``node`` from the graph and invalidate its handle.

        Args:
            node: Node to destroy
            reparent_children: Hand the children to the destroyed node's
                parent instead of turning them into roots
        """
        self._require_member(node)

        new_parent = node.parent if reparent_children else None
        for child in node.children:
            self.set_parent(child, new_parent)
        self.set_parent(node, None)

        del self._nodes[node.handle]
        node._alive = False
        logger.debug(
            "[SceneGraph] Destroyed node %d (%d nodes remain)", node.handle, len(self._nodes)
        )

    def _require_member(self, node: TransformNode) -> None:
        node._ensure_alive()
        if node.graph is not self:
            raise ValueError(
                f"TransformNode {node.handle} belongs to a different SceneGraph"
            )

    def __repr__(self) -> str:
        return f"SceneGraph(nodes={len(self._nodes)}, roots={len(self.roots())})"
