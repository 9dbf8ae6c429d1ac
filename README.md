# rigidcollide

Building blocks for collision detection in rigid-body simulations, built on numpy.

## Modules

- `rigidcollide.geometry` holds the basic types and matrix helpers.
  - `Ray` stores an origin, a direction and the inverse of the direction, one component at a time.
  - `RayHit` and `Contact` hold results.
  - `AABB` is an axis-aligned box with the methods `overlaps`, `expand`, `area` and `intersects`.
  - Helpers for 4×4 transformation matrices: `translation_matrix`, `scale_matrix`, `quaternion_matrix`, `axis_angle_matrix` and `transform_point`.
- `rigidcollide.collider` holds the collider classes.
  - `Collider` is the abstract base. It has a `parent`, a 32-bit `layers` mask with `set_layer`, an `updated` flag with `reset_updated_state`, and `clone`.
  - `ConvexCollider` answers support-point queries through `furthest_point(direction)`. The result is the point in world and in local coordinates.
  - `ConcaveCollider` is an abstract interface. Its `overlapping_parts` and `intersecting_parts` yield convex parts.
  - `TriangleCollider` is a convex collider made of a single triangle.
- `rigidcollide.aabb_tree` holds `AABBTree`, an AVL-balanced bounding volume hierarchy.
  - Leaves carry user data.
  - `add_node` returns a node id and `remove_node` removes a leaf. Freed ids are reused.
  - `all_overlaps` yields every pair of overlapping leaves once.
  - `overlaps_with` yields the leaves that overlap a box.
  - `intersections_with` yields the leaves that a ray passes through.
- `rigidcollide.gjk` holds `GJKCollisionDetector`.
  - `calculate_intersection(c1, c2)` returns `(intersects, simplex)`. It tests two convex colliders with the Gilbert–Johnson–Keerthi algorithm.
  - `SupportPoint` and `support_point` give points of the two colliders' configuration space object.
- `rigidcollide.raycast` holds `GJKRayCaster`.
  - `calculate_ray_cast(ray, collider)` returns a `RayHit` on a hit, or `None` if the ray misses.
- `rigidcollide.settings` holds parameter dataclasses and logging hooks.
  - `CollisionProperties`, `ConstraintProperties` and `WorldProperties` are the parameter dataclasses, with their default values.
  - `LogLevel` lists the log levels.
  - `LogHandler` forwards traces to the `rigidcollide` logger. By default that logger only has a null handler.
  - `log_stream(properties, level, location)` is a context manager. It collects the text written to the stream it yields, then passes that text to the properties' log handler.

Both `GJKCollisionDetector` and `GJKRayCaster` take an `epsilon` and a `max_iterations`. They also take an optional `numpy.random.Generator`, which picks their random initial directions. Pass a seeded generator to get repeatable results.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np
from rigidcollide.collider import TriangleCollider
from rigidcollide.geometry import Ray, translation_matrix
from rigidcollide.gjk import GJKCollisionDetector
from rigidcollide.raycast import GJKRayCaster

a = TriangleCollider([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
b = TriangleCollider([(0, 0, -0.5), (0, 0, 0.5), (0.5, 0.5, 0)])
b.set_transforms(translation_matrix((0.1, 0.1, 0.0)))

detector = GJKCollisionDetector(1e-7, 100, rng=np.random.default_rng(0))
collides, simplex = detector.calculate_intersection(a, b)

caster = GJKRayCaster(1e-7, 100, rng=np.random.default_rng(0))
hit = caster.calculate_ray_cast(Ray([0.2, 0.2, 5.0], [0.0, 0.0, -1.0]), a)
if hit is not None:
    print(hit.distance, hit.contact_point_world)
```

Transformation matrices are 4×4 numpy arrays that act on column vectors. To combine them, use `@`, for example `translation_matrix(t) @ quaternion_matrix(w, x, y, z)`.

## What it does not do

This package detects intersections and casts rays. It is not a complete physics engine.

- There is no world that steps rigid bodies through time. The `WorldProperties` and `ConstraintProperties` dataclasses only hold parameters.
- No contact points or penetration depths are computed. `Contact` is provided as a data type only.
- There is no constraint solver.
- Among the colliders, `TriangleCollider` is the only concrete shape. Spheres, boxes, capsules, polyhedra and triangle meshes are left to the user: subclass `ConvexCollider` or `ConcaveCollider` for them.