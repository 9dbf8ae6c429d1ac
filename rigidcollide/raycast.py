"""Ray casts against convex colliders with the GJK algorithm.

The ray is advanced along its direction while a simplex of points of the
configuration space object (the current ray point minus the collider) is
reduced towards the origin. When the origin is reached the ray point lies on
the collider surface.
"""

from __future__ import annotations

import numpy as np

from .collider import ConvexCollider
from .geometry import Ray, RayHit
from .gjk import SupportPoint

Simplex = list[SupportPoint]
Mask = list[bool]


def _project_on_edge(point: np.ndarray, a: np.ndarray, b: np.ndarray, epsilon: float):
    """Return whether the projection of ``point`` falls on the edge, and its
    barycentric coordinates relative to ``a`` and ``b``."""
    ab = b - a
    length2 = float(np.dot(ab, ab))
    if length2 <= 0.0:
        return True, np.array([1.0, 0.0])
    t = float(np.dot(point - a, ab)) / length2
    coords = np.array([1.0 - t, t])
    return bool(np.all(coords >= -epsilon)), coords


def _project_on_triangle(
    point: np.ndarray, a: np.ndarray, b: np.ndarray, c: np.ndarray, epsilon: float
):
    """Return whether the projection of ``point`` onto the triangle plane falls
    inside the triangle, and its barycentric coordinates."""
    v0, v1, v2 = b - a, c - a, point - a
    d00 = float(np.dot(v0, v0))
    d01 = float(np.dot(v0, v1))
    d11 = float(np.dot(v1, v1))
    d20 = float(np.dot(v2, v0))
    d21 = float(np.dot(v2, v1))
    denom = d00 * d11 - d01 * d01
    if abs(denom) <= np.finfo(float).eps * max(d00 * d11, 1.0):
        # Degenerate triangle: fall back to its longest edge
        edges = [(0, 1), (1, 2), (0, 2)]
        vertices = (a, b, c)
        i, j = max(edges, key=lambda e: float(np.sum((vertices[e[1]] - vertices[e[0]]) ** 2)))
        inside, edge_coords = _project_on_edge(point, vertices[i], vertices[j], epsilon)
        coords = np.zeros(3)
        coords[i], coords[j] = edge_coords
        return inside, coords
    v = (d11 * d20 - d01 * d21) / denom
    w = (d00 * d21 - d01 * d20) / denom
    coords = np.array([1.0 - v - w, v, w])
    return bool(np.all(coords >= -epsilon)), coords


def _interpolate(points: Simplex, coords: np.ndarray) -> SupportPoint:
    worlds = tuple(
        sum(weight * p.world_positions[k] for weight, p in zip(coords, points)) for k in range(2)
    )
    locals_ = tuple(
        sum(weight * p.local_positions[k] for weight, p in zip(coords, points)) for k in range(2)
    )
    return SupportPoint(worlds, locals_)


class GJKRayCaster:
    """Casts rays against arbitrary convex colliders in three dimensions."""

    def __init__(
        self,
        epsilon: float,
        max_iterations: int,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.epsilon = epsilon
        self.max_iterations = max_iterations
        self._rng = rng if rng is not None else np.random.default_rng()

    def calculate_ray_cast(self, ray: Ray, collider: ConvexCollider) -> RayHit | None:
        """Return where the ray hits the collider, or None if it misses."""
        eps = self.epsilon
        zeros = np.zeros(3)

        random_world, _ = collider.furthest_point(self._random_direction())

        lam = 0.0
        x = ray.origin.copy()
        normal = np.zeros(3)
        v = x - random_world
        simplex: Simplex = []
        mask: Mask = []

        dist2 = float(np.dot(v, v))
        iteration = 0
        while dist2 > eps * eps and iteration < self.max_iterations:
            point_world, point_local = collider.furthest_point(v)

            w = x - point_world
            vw = float(np.dot(v, w))
            if vw > eps:
                vr = float(np.dot(v, ray.direction))
                if vr >= -eps:
                    return None
                lam -= vw / vr
                x = ray.origin + lam * ray.direction
                normal = v.copy()

            # The ray point moved, so every CSO point moves with it
            simplex = [
                SupportPoint((x, p.world_positions[1]), (zeros, p.local_positions[1]))
                for p in simplex
            ]

            new_point = SupportPoint((x, point_world), (zeros, point_local))
            if not self._is_close(simplex, new_point.cso_position):
                simplex.append(new_point)
                mask.append(False)

            closest, new_mask = self._closest_point(simplex, mask)
            if closest is not None:
                v = closest.cso_position
                dist2 = float(np.dot(v, v))
                simplex = [p for p, keep in zip(simplex, new_mask) if keep]
                mask = [keep for keep in new_mask if keep]
            else:
                dist2 = 0.0

            iteration += 1

        closest, _ = self._closest_point(simplex, mask)
        if closest is None:
            return None

        length = float(np.linalg.norm(normal))
        return RayHit(
            distance=lam,
            contact_point_world=closest.world_positions[1].copy(),
            contact_point_local=closest.local_positions[1].copy(),
            contact_normal=normal / length if length > eps else np.zeros(3),
        )

    # -- helpers ---------------------------------------------------------

    def _random_direction(self) -> np.ndarray:
        while True:
            vector = self._rng.normal(size=3)
            length = float(np.linalg.norm(vector))
            if length > 0.0:
                return vector / length

    def _is_close(self, simplex: Simplex, point: np.ndarray) -> bool:
        return any(
            float(np.linalg.norm(p.cso_position - point)) < self.epsilon for p in simplex
        )

    def _closest_point(self, simplex: Simplex, mask: Mask):
        """Return the simplex point closest to the origin and which vertices it uses."""
        handlers = {
            1: self._closest_point1,
            2: self._closest_point2,
            3: self._closest_point3,
            4: self._closest_point4,
        }
        handler = handlers.get(len(simplex))
        if handler is None:
            return None, list(mask)
        return handler(simplex, mask)

    def _closest_point1(self, simplex: Simplex, mask: Mask):
        return simplex[0], [True]

    def _closest_point2(self, simplex: Simplex, mask: Mask):
        eps = self.epsilon
        inside, coords = _project_on_edge(
            np.zeros(3), simplex[0].cso_position, simplex[1].cso_position, eps
        )
        new_mask = list(mask)
        if inside:
            new_mask = [True, True]
        else:
            if coords[0] < -eps:
                new_mask = [False, True]
            elif coords[1] < -eps:
                new_mask = [True, False]
            coords = np.clip(coords, 0.0, 1.0)
        return _interpolate(simplex, coords), new_mask

    def _closest_point3(self, simplex: Simplex, mask: Mask):
        eps = self.epsilon
        inside, coords = _project_on_triangle(
            np.zeros(3), *(p.cso_position for p in simplex), eps
        )
        if inside:
            new_mask = [True, True, True]
        else:
            new_mask = [bool(c >= -eps) for c in coords]
            coords = np.clip(coords, 0.0, 1.0)
        return _interpolate(simplex, coords), new_mask

    def _closest_point4(self, simplex: Simplex, mask: Mask):
        eps = self.epsilon
        best = None
        best_mask = list(mask)
        min_distance = np.inf
        for i in range(4):
            indices = (i % 3, (i + 1) % 3, (i + 2) % 3)
            triangle = [simplex[k] for k in indices]
            current_mask = [False] * 4

            inside, coords = _project_on_triangle(
                np.zeros(3), *(p.cso_position for p in triangle), eps
            )
            if inside:
                for k in indices:
                    current_mask[k] = True
            else:
                for k in indices:
                    current_mask[k] = bool(coords[k] >= -eps)
                coords = np.clip(coords, 0.0, 1.0)

            candidate = _interpolate(triangle, coords)
            distance = float(np.dot(candidate.cso_position, candidate.cso_position))
            if distance < min_distance:
                min_distance = distance
                best = candidate
                best_mask = current_mask
        return best, best_mask