"""A self-balancing tree of axis-aligned boxes for overlap and ray queries."""

from __future__ import annotations

import heapq
import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .geometry import AABB, Ray


@dataclass
class _Node:
    parent: int = 0
    left: int = 0
    right: int = 0
    height: int = 0
    is_leaf: bool = True
    aabb: AABB = field(default_factory=AABB)
    user_data: Any = None


class AABBTree:
    """An AVL tree of bounding boxes.

    Leaves hold the boxes added by the caller together with their user data;
    internal nodes hold the box that wraps their children. The tree rebalances
    itself after every insertion and removal. Node ids stay valid until the
    node is removed, and the ids of removed nodes are reused.
    """

    def __init__(self) -> None:
        self._nodes: dict[int, _Node] = {}
        self._free: list[int] = []
        self._next_id = 0
        self._root = 0

    def __len__(self) -> int:
        """Return the number of nodes, internal ones included."""
        return len(self._nodes)

    # -- storage ---------------------------------------------------------

    def _allocate(self, node: _Node) -> int:
        if self._free:
            index = heapq.heappop(self._free)
        else:
            index = self._next_id
            self._next_id += 1
        self._nodes[index] = node
        return index

    def _release(self, index: int) -> None:
        del self._nodes[index]
        heapq.heappush(self._free, index)

    def _leaf(self, node_id: int) -> _Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"no node with id {node_id}") from None

    # -- public interface ------------------------------------------------

    def add_node(self, aabb: AABB, user_data: Any = None) -> int:
        """Insert a leaf with the given box and data; return its node id."""
        index = self._allocate(_Node(aabb=aabb, user_data=user_data))
        nodes = self._nodes
        nodes[index].parent = index

        if len(nodes) == 1:
            self._root = index
            return index

        sibling = self._best_sibling(index)

        new_parent = self._allocate(_Node(is_leaf=False, left=index, right=sibling))
        old_parent = nodes[sibling].parent
        nodes[sibling].parent = new_parent
        nodes[index].parent = new_parent

        if self._root == sibling:
            nodes[new_parent].parent = new_parent
            self._root = new_parent
        else:
            if nodes[old_parent].left == sibling:
                nodes[old_parent].left = new_parent
            else:
                nodes[old_parent].right = new_parent
            nodes[new_parent].parent = old_parent

        self._update_ancestors(index)
        return index

    def remove_node(self, node_id: int) -> None:
        """Remove the leaf with the given id from the tree."""
        node = self._leaf(node_id)
        if not node.is_leaf:
            raise ValueError(f"node {node_id} is an internal node, only leaves can be removed")

        nodes = self._nodes
        if node_id != self._root:
            parent = node.parent
            sibling = nodes[parent].right if nodes[parent].left == node_id else nodes[parent].left

            if parent == self._root:
                nodes[sibling].parent = sibling
                self._root = sibling
            else:
                grandparent = nodes[parent].parent
                if nodes[grandparent].left == parent:
                    nodes[grandparent].left = sibling
                else:
                    nodes[grandparent].right = sibling
                nodes[sibling].parent = grandparent
                self._update_ancestors(sibling)

            self._release(parent)

        self._release(node_id)

    def user_data(self, node_id: int) -> Any:
        """Return the user data stored in a node."""
        return self._leaf(node_id).user_data

    def node_aabb(self, node_id: int) -> AABB:
        """Return the box of a node."""
        return self._leaf(node_id).aabb

    def root_aabb(self) -> AABB:
        """Return the box of the root node, which wraps every other box."""
        if not self._nodes:
            raise LookupError("the tree is empty")
        return self._nodes[self._root].aabb

    def all_overlaps(self, epsilon: float = 0.0) -> Iterator[tuple[int, int]]:
        """Yield every pair of overlapping leaves, each pair once."""
        if not self._nodes:
            return
        nodes = self._nodes
        traversed: set[int] = set()
        for index1 in sorted(nodes):
            traversed.add(index1)
            node1 = nodes[index1]
            if not node1.is_leaf:
                continue
            stack = [self._root]
            while stack:
                index2 = stack.pop()
                node2 = nodes[index2]
                if node2.is_leaf:
                    if index2 not in traversed and node1.aabb.overlaps(node2.aabb, epsilon):
                        yield index1, index2
                elif node1.aabb.overlaps(node2.aabb, epsilon):
                    stack.append(node2.left)
                    stack.append(node2.right)

    def overlaps_with(self, aabb: AABB, epsilon: float = 0.0) -> Iterator[int]:
        """Yield the ids of the leaves that overlap the given box."""
        if not self._nodes:
            return
        nodes = self._nodes
        stack = [self._root]
        while stack:
            index = stack.pop()
            node = nodes[index]
            if node.aabb.overlaps(aabb, epsilon):
                if node.is_leaf:
                    yield index
                else:
                    stack.append(node.left)
                    stack.append(node.right)

    def intersections_with(self, ray: Ray, epsilon: float = 0.0) -> Iterator[int]:
        """Yield the ids of the leaves that the given ray passes through."""
        if not self._nodes:
            return
        nodes = self._nodes
        stack = [self._root]
        while stack:
            index = stack.pop()
            node = nodes[index]
            if node.aabb.intersects(ray, epsilon):
                if node.is_leaf:
                    yield index
                else:
                    stack.append(node.left)
                    stack.append(node.right)

    # -- balancing -------------------------------------------------------

    def _best_sibling(self, node_index: int) -> int:
        nodes = self._nodes
        new_box = nodes[node_index].aabb
        new_area = new_box.area()
        stack = [(self._root, 0.0)]
        best_sibling = self._root
        best_cost = math.inf

        while stack:
            index, ancestor_cost = stack.pop()
            node = nodes[index]

            cost = node.aabb.expand(new_box).area() + ancestor_cost
            if cost < best_cost:
                best_sibling = index
                best_cost = cost

            if not node.is_leaf:
                branch_cost = node.aabb.area() + ancestor_cost
                if new_area + branch_cost < best_cost:
                    stack.append((node.left, branch_cost))
                    stack.append((node.right, branch_cost))

        return best_sibling

    def _update_ancestors(self, node_index: int) -> None:
        if node_index == self._root:
            return
        nodes = self._nodes
        index = nodes[node_index].parent
        while True:
            node = nodes[index]
            left, right = nodes[node.left], nodes[node.right]
            node.height = max(left.height, right.height) + 1
            node.aabb = left.aabb.expand(right.aabb)

            self._rotate(index)

            if index == self._root:
                return
            index = nodes[index].parent

    def _rotate(self, index: int) -> None:
        nodes = self._nodes
        node = nodes[index]
        if node.is_leaf:
            return

        left, right = node.left, node.right
        balance = self._balance(index)
        if balance > 1:
            left_balance = self._balance(left)
            if left_balance > 0:
                self._swap(index, left)
            elif left_balance < 0:
                grandchild = nodes[left].right
                self._swap(left, grandchild)
                self._swap(index, grandchild)
        elif balance < -1:
            right_balance = self._balance(right)
            if right_balance < 0:
                self._swap(index, right)
            elif right_balance > 0:
                grandchild = nodes[right].left
                self._swap(right, grandchild)
                self._swap(index, grandchild)

    def _swap(self, parent: int, child: int) -> None:
        """Move ``child`` up into the place of ``parent``; both are internal."""
        nodes = self._nodes

        if self._root == parent:
            nodes[child].parent = child
            self._root = child
        else:
            grandparent = nodes[parent].parent
            if nodes[grandparent].left == parent:
                nodes[grandparent].left = child
            else:
                nodes[grandparent].right = child
            nodes[child].parent = grandparent

        if nodes[parent].left == child:
            grandchild = nodes[child].right
            nodes[child].right = parent
            nodes[grandchild].parent = parent
            nodes[parent].left = grandchild
        else:
            grandchild = nodes[child].left
            nodes[child].left = parent
            nodes[grandchild].parent = parent
            nodes[parent].right = grandchild
        nodes[parent].parent = child

        for index in (parent, child):
            node = nodes[index]
            left, right = nodes[node.left], nodes[node.right]
            node.height = max(left.height, right.height) + 1
            node.aabb = left.aabb.expand(right.aabb)

    def _balance(self, index: int) -> int:
        node = self._nodes[index]
        if node.is_leaf:
            return 0
        return self._nodes[node.left].height - self._nodes[node.right].height