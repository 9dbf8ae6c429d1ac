"""Simulation parameters and the log handler used to report traces."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from .geometry import AABB

_logger = logging.getLogger("rigidcollide")
_logger.addHandler(logging.NullHandler())


@dataclass
class CollisionProperties:
    """Parameters of the collision detection step."""

    #: Maximum number of colliders intersecting at the same time.
    max_colliders_intersecting: int = 128
    #: Epsilon used when testing the colliders' boxes in the coarse step.
    coarse_epsilon: float = 0.0001
    #: Maximum number of iterations of the collision and intersection algorithms.
    max_iterations: int = 100
    #: Threshold used to decide that the closest face in contact was found.
    min_f_difference: float = 0.00001
    #: Precision of the calculated contact points.
    contact_precision: float = 0.0000001
    #: Minimum distance between two contacts for them to count as different.
    contact_separation: float = 0.00001
    #: Precision of the calculated ray casts.
    raycast_precision: float = 0.0000001


@dataclass
class ConstraintProperties:
    """Parameters of the constraint resolution step."""

    #: Speed of the resolution of the collision normal constraints.
    collision_beta: float = 0.1
    #: Restitution factor of the collision normal constraints.
    collision_restitution_factor: float = 0.2
    #: Penetration slop of the collision normal constraints.
    collision_slop_penetration: float = 0.005
    #: Restitution slop of the collision normal constraints.
    collision_slop_restitution: float = 0.5
    #: Gravity acceleration used by the friction constraints.
    friction_gravity_acceleration: float = 9.8
    #: Maximum number of Gauss-Seidel iterations used to solve the constraints.
    max_iterations: int = 1


class LogLevel(IntEnum):
    """Severity of a trace."""

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3


class LogHandler:
    """Receives the traces of a simulation.

    The base class forwards every trace to the ``rigidcollide`` logger, which
    has only a null handler attached, so nothing is printed unless the
    application configures logging. Subclass it and override the methods of
    the levels that should be handled differently.
    """

    def error(self, message: str) -> None:
        """Handle an error trace."""
        _logger.error(message)

    def warning(self, message: str) -> None:
        """Handle a warning trace."""
        _logger.warning(message)

    def info(self, message: str) -> None:
        """Handle an info trace."""
        _logger.info(message)

    def debug(self, message: str) -> None:
        """Handle a debug trace."""
        _logger.debug(message)


DEFAULT_LOG_HANDLER = LogHandler()


def _default_world_aabb() -> AABB:
    return AABB(np.full(3, -1000.0), np.full(3, 1000.0))


@dataclass
class WorldProperties:
    """Every property of a simulated world."""

    #: Bias used when updating the motion value of the rigid bodies.
    motion_bias: float = 0.1
    #: Bounds of the world.
    world_aabb: AABB = field(default_factory=_default_world_aabb)
    collision_properties: CollisionProperties = field(default_factory=CollisionProperties)
    constraint_properties: ConstraintProperties = field(default_factory=ConstraintProperties)
    #: Number of substeps run on every update.
    num_substeps: int = 4
    #: Number of worker threads.
    num_threads: int = 8
    #: Where the traces of the world go.
    log_handler: LogHandler = DEFAULT_LOG_HANDLER


@contextmanager
def log_stream(
    properties: WorldProperties, level: LogLevel, location: str | None = None
) -> Iterator[io.StringIO]:
    """Collect a trace written to the yielded stream and hand it over on exit.

    The text is prefixed with ``"<location>: "`` when a location such as
    ``"update(42)"`` is given, and passed to the method of the properties'
    log handler that matches ``level``, even if the block raised.
    """
    level = LogLevel(level)
    handler = properties.log_handler
    dispatch = {
        LogLevel.ERROR: handler.error,
        LogLevel.WARNING: handler.warning,
        LogLevel.INFO: handler.info,
        LogLevel.DEBUG: handler.debug,
    }
    buffer = io.StringIO()
    if location is not None:
        buffer.write(f"{location}: ")
    try:
        yield buffer
    finally:
        dispatch[level](buffer.getvalue())