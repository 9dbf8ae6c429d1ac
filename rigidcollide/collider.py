"""Collider interfaces and the triangle collider."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterator

import numpy as np

from .geometry import AABB, Ray

MAX_LAYERS = 32


def _as_matrix(transforms) -> np.ndarray:
    matrix = np.array(transforms, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"a transformation matrix must be 4x4, got shape {matrix.shape}")
    return matrix


def _as_triangle(vertices) -> np.ndarray:
    if vertices is None:
        return np.zeros((3, 3))
    array = np.array(vertices, dtype=float)
    if array.shape != (3, 3):
        raise ValueError(f"a triangle needs 3 vertices of 3 components, got shape {array.shape}")
    return array


class Collider(ABC):
    """Base of every shape that can collide with other shapes.

    Only colliders sharing at least one layer can collide; a new collider
    lives in layer 0 alone.
    """

    def __init__(self) -> None:
        self._parent = None
        self._layers = 0x1
        self._updated = True

    @property
    def parent(self):
        """The rigid body that owns the collider, or None."""
        return self._parent

    @parent.setter
    def parent(self, parent) -> None:
        self._parent = parent
        self._updated = True

    @property
    def layers(self) -> int:
        """The layer bit mask of the collider."""
        return self._layers

    @layers.setter
    def layers(self, mask: int) -> None:
        if not 0 <= mask < (1 << MAX_LAYERS):
            raise ValueError(f"layer mask must fit in {MAX_LAYERS} bits")
        self._layers = mask
        self._updated = True

    def set_layer(self, index: int, value: bool) -> None:
        """Turn one layer of the collider on or off."""
        if not 0 <= index < MAX_LAYERS:
            raise IndexError(f"layer index must be in [0, {MAX_LAYERS - 1}], got {index}")
        if value:
            self._layers |= 1 << index
        else:
            self._layers &= ~(1 << index)
        self._updated = True

    @property
    def updated(self) -> bool:
        """Whether the collider changed since the last reset."""
        return self._updated

    def reset_updated_state(self) -> None:
        self._updated = False

    def clone(self) -> Collider:
        """Return an independent copy that shares the same parent."""
        memo = {} if self._parent is None else {id(self._parent): self._parent}
        return copy.deepcopy(self, memo)

    @abstractmethod
    def set_transforms(self, transforms) -> None:
        """Place the collider with a 4x4 transformation matrix."""

    @property
    @abstractmethod
    def transforms(self) -> np.ndarray:
        """The 4x4 transformation matrix applied to the collider."""

    @abstractmethod
    def aabb(self) -> AABB:
        """Return the axis-aligned box that holds the collider."""


class ConvexCollider(Collider):
    """A collider with a convex shape."""

    @abstractmethod
    def furthest_point(self, direction) -> tuple[np.ndarray, np.ndarray]:
        """Return the furthest point along ``direction`` in world and local space."""


class ConcaveCollider(Collider):
    """A collider with a concave shape made of convex parts."""

    @abstractmethod
    def overlapping_parts(self, aabb: AABB, epsilon: float) -> Iterator[ConvexCollider]:
        """Yield the convex parts that overlap the given box."""

    @abstractmethod
    def intersecting_parts(self, ray: Ray, epsilon: float) -> Iterator[ConvexCollider]:
        """Yield the convex parts that the given ray passes through."""


class TriangleCollider(ConvexCollider):
    """A convex collider made of a single triangle."""

    def __init__(self, vertices=None) -> None:
        super().__init__()
        self._local = _as_triangle(vertices)
        self._world = self._local.copy()
        self._transforms = np.eye(4)

    @property
    def local_vertices(self) -> np.ndarray:
        """The three vertices in local coordinates."""
        return self._local.copy()

    @property
    def world_vertices(self) -> np.ndarray:
        """The three vertices in world coordinates."""
        return self._world.copy()

    @property
    def transforms(self) -> np.ndarray:
        return self._transforms.copy()

    def _update_world(self) -> None:
        homogeneous = np.hstack([self._local, np.ones((3, 1))])
        self._world = (homogeneous @ self._transforms.T)[:, :3]
        self._updated = True

    def set_local_vertices(self, vertices) -> None:
        self._local = _as_triangle(vertices)
        self._update_world()

    def set_transforms(self, transforms) -> None:
        self._transforms = _as_matrix(transforms)
        self._update_world()

    def aabb(self) -> AABB:
        return AABB(self._world.min(axis=0), self._world.max(axis=0))

    def furthest_point(self, direction) -> tuple[np.ndarray, np.ndarray]:
        d = np.array(direction, dtype=float)
        if d.shape != (3,):
            raise ValueError("direction must have exactly 3 components")
        index = int(np.argmax(self._world @ d))
        return self._world[index].copy(), self._local[index].copy()