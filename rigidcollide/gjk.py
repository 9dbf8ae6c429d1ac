"""Intersection tests between convex colliders with the GJK algorithm.

The algorithm works on the configuration space object (CSO) of two convex
shapes, the Minkowski difference of the first shape and the second one. Two
shapes intersect when the CSO holds the origin. Each iteration builds a
simplex of up to four CSO points and tries to make it enclose the origin.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .collider import ConvexCollider
from .geometry import transform_point


def _normalize(vector: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    if length == 0.0:
        return np.zeros(3)
    return vector / length


@dataclass(frozen=True, eq=False)
class SupportPoint:
    """A point of the CSO of two colliders.

    ``world_positions`` and ``local_positions`` hold the point on each of the
    two colliders; the CSO point is the first minus the second.
    """

    world_positions: tuple[np.ndarray, np.ndarray]
    local_positions: tuple[np.ndarray, np.ndarray]

    def __post_init__(self) -> None:
        for name in ("world_positions", "local_positions"):
            pair = tuple(np.array(p, dtype=float) for p in getattr(self, name))
            if len(pair) != 2 or any(p.shape != (3,) for p in pair):
                raise ValueError(f"{name} must hold two points of 3 components")
            object.__setattr__(self, name, pair)

    @property
    def cso_position(self) -> np.ndarray:
        """The position of the point in the configuration space object."""
        return self.world_positions[0] - self.world_positions[1]


def support_point(
    collider1: ConvexCollider, collider2: ConvexCollider, direction
) -> SupportPoint:
    """Return the CSO point of both colliders furthest along ``direction``."""
    d = np.array(direction, dtype=float)
    if d.shape != (3,):
        raise ValueError("direction must have exactly 3 components")
    world1, local1 = collider1.furthest_point(d)
    world2, local2 = collider2.furthest_point(-d)
    return SupportPoint((world1, world2), (local1, local2))


Simplex = list[SupportPoint]


class GJKCollisionDetector:
    """Detects intersections between convex colliders in three dimensions."""

    def __init__(
        self,
        epsilon: float,
        max_iterations: int,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.epsilon = epsilon
        self.max_iterations = max_iterations
        self._rng = rng if rng is not None else np.random.default_rng()

    def calculate_intersection(
        self, collider1: ConvexCollider, collider2: ConvexCollider
    ) -> tuple[bool, Simplex]:
        """Return whether the colliders intersect and the last simplex built.

        When they intersect the simplex encloses the origin of the CSO.
        """
        origin = np.zeros(3)
        location1 = transform_point(collider1.transforms, origin)
        location2 = transform_point(collider2.transforms, origin)
        if np.array_equal(location1, location2):
            direction = self._random_direction()
        else:
            direction = _normalize(location2 - location1)

        simplex: Simplex = [support_point(collider1, collider2, direction)]
        contains_origin, simplex, direction = self._do_simplex(simplex, direction)

        iteration = 0
        while not contains_origin:
            if iteration >= self.max_iterations:
                return False, simplex

            point = support_point(collider1, collider2, direction)
            if float(np.dot(point.cso_position, direction)) < -self.epsilon:
                # The CSO does not reach past the origin along the direction
                return False, simplex

            simplex = [*simplex, point]
            contains_origin, simplex, direction = self._do_simplex(simplex, direction)
            iteration += 1

        return True, simplex

    # -- simplex reduction -------------------------------------------------

    def _random_direction(self) -> np.ndarray:
        while True:
            vector = self._rng.normal(size=3)
            length = float(np.linalg.norm(vector))
            if length > 0.0:
                return vector / length

    def _do_simplex(self, simplex: Simplex, direction: np.ndarray):
        if not simplex:
            raise ValueError("the simplex has to have at least one point")
        handlers = {
            1: self._simplex_0d,
            2: self._simplex_1d,
            3: self._simplex_2d,
            4: self._simplex_3d,
        }
        handler = handlers.get(len(simplex))
        if handler is None:
            return False, simplex, direction
        return handler(simplex, direction)

    def _simplex_0d(self, simplex: Simplex, direction: np.ndarray):
        (a,) = simplex
        a0 = -a.cso_position
        if np.all(np.abs(a0) < self.epsilon):
            # The support point is the origin
            return True, simplex, direction
        return False, simplex, _normalize(a0)

    def _simplex_1d(self, simplex: Simplex, direction: np.ndarray):
        a, b = simplex
        ba = a.cso_position - b.cso_position
        b0 = -b.cso_position

        if float(np.dot(ba, b0)) < -self.epsilon:
            # The origin lies beyond b, away from a
            return self._simplex_0d([b], direction)

        n = _normalize(np.cross(np.cross(ba, b0), ba))
        if float(np.dot(b0, n)) > self.epsilon:
            return False, simplex, n
        # The origin is on the segment
        return True, simplex, direction

    def _simplex_2d(self, simplex: Simplex, direction: np.ndarray):
        a, b, c = simplex
        ca = a.cso_position - c.cso_position
        cb = b.cso_position - c.cso_position
        c0 = -c.cso_position
        n = _normalize(np.cross(cb, ca))
        nxca = _normalize(np.cross(n, ca))
        cbxn = _normalize(np.cross(cb, n))

        if float(np.dot(nxca, c0)) > self.epsilon:
            # Outside the triangle past the ca edge
            return self._simplex_1d([a, c], direction)
        if float(np.dot(cbxn, c0)) > self.epsilon:
            # Outside the triangle past the cb edge
            return self._simplex_1d([b, c], direction)

        dot = float(np.dot(n, c0))
        if dot > self.epsilon:
            return False, simplex, n
        if dot < -self.epsilon:
            # Flip the winding so the normal faces the origin
            return False, [b, a, c], -n
        # The origin is on the triangle
        return True, simplex, direction

    def _simplex_3d(self, simplex: Simplex, direction: np.ndarray):
        a, b, c, d = simplex
        da = a.cso_position - d.cso_position
        db = b.cso_position - d.cso_position
        dc = c.cso_position - d.cso_position
        d0 = -d.cso_position
        dbxda = _normalize(np.cross(db, da))
        daxdc = _normalize(np.cross(da, dc))
        dcxdb = _normalize(np.cross(dc, db))

        if float(np.dot(dbxda, d0)) > self.epsilon:
            return self._simplex_2d([a, b, d], direction)
        if float(np.dot(daxdc, d0)) > self.epsilon:
            return self._simplex_2d([c, a, d], direction)
        if float(np.dot(dcxdb, d0)) > self.epsilon:
            return self._simplex_2d([b, c, d], direction)
        # The origin is inside the tetrahedron
        return True, simplex, direction