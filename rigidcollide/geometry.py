"""Vectors, transformation matrices, rays, contacts and bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np


def _vec3(value, name: str = "vector") -> np.ndarray:
    array = np.array(value, dtype=float)
    if array.shape != (3,):
        raise ValueError(f"{name} must have exactly 3 components, got shape {array.shape}")
    return array


def _matrix4(value) -> np.ndarray:
    matrix = np.array(value, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"a transformation matrix must be 4x4, got shape {matrix.shape}")
    return matrix


def _zeros() -> np.ndarray:
    return np.zeros(3)


@dataclass(eq=False)
class Ray:
    """A half line with an origin and a direction."""

    origin: np.ndarray
    direction: np.ndarray
    inverted_direction: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        self.origin = _vec3(self.origin, "origin")
        self.direction = _vec3(self.direction, "direction")
        with np.errstate(divide="ignore"):
            self.inverted_direction = 1.0 / self.direction


@dataclass(eq=False)
class RayHit:
    """Where and how a ray hit a collider."""

    distance: float = 0.0
    contact_point_world: np.ndarray = field(default_factory=_zeros)
    contact_point_local: np.ndarray = field(default_factory=_zeros)
    contact_normal: np.ndarray = field(default_factory=_zeros)


@dataclass(eq=False)
class Contact:
    """A contact between two colliders produced by a collision.

    ``normal`` points out of the first collider, starting at the second
    contact point. ``world_position`` and ``local_position`` hold one point
    for each collider.
    """

    penetration: float = 0.0
    normal: np.ndarray = field(default_factory=_zeros)
    world_position: list = field(default_factory=lambda: [_zeros(), _zeros()])
    local_position: list = field(default_factory=lambda: [_zeros(), _zeros()])


@dataclass(eq=False)
class AABB:
    """An axis-aligned bounding box given by its minimum and maximum corners."""

    minimum: np.ndarray = field(default_factory=_zeros)
    maximum: np.ndarray = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        self.minimum = _vec3(self.minimum, "minimum")
        self.maximum = _vec3(self.maximum, "maximum")

    def overlaps(self, other: AABB, epsilon: float = 0.0) -> bool:
        """Return True if both boxes overlap, allowing a gap of ``epsilon``."""
        return bool(
            np.all(self.minimum <= other.maximum + epsilon)
            and np.all(other.minimum <= self.maximum + epsilon)
        )

    def expand(self, other: AABB) -> AABB:
        """Return the smallest box that holds both boxes."""
        return AABB(np.minimum(self.minimum, other.minimum), np.maximum(self.maximum, other.maximum))

    def area(self) -> float:
        """Return the surface area of the box."""
        dx, dy, dz = self.maximum - self.minimum
        return float(2.0 * (dx * dy + dy * dz + dz * dx))

    def intersects(self, ray: Ray, epsilon: float = 0.0) -> bool:
        """Return True if the ray passes through the box grown by ``epsilon``."""
        low = self.minimum - epsilon
        high = self.maximum + epsilon
        with np.errstate(invalid="ignore"):
            t1 = (low - ray.origin) * ray.inverted_direction
            t2 = (high - ray.origin) * ray.inverted_direction
        near = np.fmin(t1, t2)
        far = np.fmax(t1, t2)
        near = np.where(np.isnan(near), -np.inf, near)
        far = np.where(np.isnan(far), np.inf, far)
        t_near = float(near.max())
        t_far = float(far.min())
        return t_far >= max(t_near, 0.0)


def translation_matrix(offset) -> np.ndarray:
    """Return the 4x4 matrix that moves points by ``offset``."""
    matrix = np.eye(4)
    matrix[:3, 3] = _vec3(offset, "offset")
    return matrix


def scale_matrix(factors) -> np.ndarray:
    """Return the 4x4 matrix that scales points along each axis."""
    fx, fy, fz = _vec3(factors, "factors")
    return np.diag([fx, fy, fz, 1.0])


def quaternion_matrix(w: float, x: float, y: float, z: float) -> np.ndarray:
    """Return the 4x4 rotation matrix of a unit quaternion."""
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy), 0.0],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx), 0.0],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy), 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def axis_angle_matrix(angle: float, axis) -> np.ndarray:
    """Return the 4x4 matrix that rotates ``angle`` radians around ``axis``."""
    vector = _vec3(axis, "axis")
    length = float(np.linalg.norm(vector))
    if length == 0.0:
        raise ValueError("the rotation axis must not be the zero vector")
    x, y, z = vector / length * math.sin(angle / 2.0)
    return quaternion_matrix(math.cos(angle / 2.0), x, y, z)


def transform_point(matrix, point) -> np.ndarray:
    """Apply a 4x4 transformation matrix to a 3D point."""
    m = _matrix4(matrix)
    p = _vec3(point, "point")
    return (m @ np.append(p, 1.0))[:3]