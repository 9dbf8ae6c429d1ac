"""Collision detection building blocks: geometry, colliders, AABB trees, GJK tests, ray casts and settings."""

__version__ = "0.1.0"

__all__ = ["aabb_tree", "collider", "geometry", "gjk", "raycast", "settings"]