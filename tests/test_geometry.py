import math

import numpy as np
import pytest

from rigidcollide.geometry import (
    AABB,
    Contact,
    Ray,
    RayHit,
    axis_angle_matrix,
    quaternion_matrix,
    scale_matrix,
    transform_point,
    translation_matrix,
)


def unit_box(offset=(0.0, 0.0, 0.0)):
    o = np.array(offset, dtype=float)
    return AABB(o, o + 1.0)


def test_ray_inverted_direction_is_reciprocal():
    ray = Ray((1.0, 2.0, 3.0), (0.5, -4.0, 2.0))
    assert np.allclose(ray.direction * ray.inverted_direction, np.ones(3))


def test_ray_zero_component_gives_infinity():
    ray = Ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    assert ray.inverted_direction.tolist() == [1.0, math.inf, math.inf]


def test_ray_rejects_wrong_shape():
    with pytest.raises(ValueError):
        Ray((0.0, 0.0), (1.0, 0.0, 0.0))


def test_contact_and_rayhit_defaults_are_zero():
    contact = Contact()
    assert contact.penetration == 0.0
    assert np.array_equal(contact.normal, np.zeros(3))
    assert all(np.array_equal(p, np.zeros(3)) for p in contact.world_position)
    assert all(np.array_equal(p, np.zeros(3)) for p in contact.local_position)
    hit = RayHit()
    assert hit.distance == 0.0
    assert np.array_equal(hit.contact_normal, np.zeros(3))


def test_contact_defaults_are_independent():
    first, second = Contact(), Contact()
    first.world_position[0][0] = 5.0
    assert second.world_position[0][0] == 0.0


def test_aabb_overlaps_itself_and_is_symmetric():
    a = unit_box()
    b = unit_box((0.5, 0.5, 0.5))
    assert a.overlaps(a, 0.0)
    assert a.overlaps(b, 0.0) and b.overlaps(a, 0.0)


def test_aabb_disjoint_boxes_do_not_overlap():
    a = unit_box()
    b = unit_box((3.0, 0.0, 0.0))
    assert not a.overlaps(b, 0.0)
    assert not b.overlaps(a, 0.0)


def test_aabb_epsilon_bridges_small_gap():
    a = unit_box()
    b = unit_box((1.001, 0.0, 0.0))
    assert not a.overlaps(b, 0.0)
    assert a.overlaps(b, 0.01)


def test_aabb_expand_contains_both():
    a = unit_box()
    b = unit_box((2.0, -3.0, 1.0))
    c = a.expand(b)
    for box in (a, b):
        assert np.all(c.minimum <= box.minimum)
        assert np.all(c.maximum >= box.maximum)
    assert c.area() >= max(a.area(), b.area())


def test_aabb_expand_with_itself_is_unchanged():
    a = unit_box((1.0, 2.0, 3.0))
    c = a.expand(a)
    assert np.array_equal(c.minimum, a.minimum)
    assert np.array_equal(c.maximum, a.maximum)


def test_aabb_area_of_unit_cube():
    assert unit_box().area() == pytest.approx(6.0)


def test_aabb_ray_hits_box_ahead():
    ray = Ray((-5.0, 0.5, 0.5), (1.0, 0.0, 0.0))
    assert unit_box().intersects(ray, 0.0)


def test_aabb_ray_pointing_away_misses():
    ray = Ray((-5.0, 0.5, 0.5), (-1.0, 0.0, 0.0))
    assert not unit_box().intersects(ray, 0.0)


def test_aabb_ray_passing_beside_misses_unless_epsilon():
    ray = Ray((-5.0, 1.001, 0.5), (1.0, 0.0, 0.0))
    assert not unit_box().intersects(ray, 0.0)
    assert unit_box().intersects(ray, 0.01)


def test_aabb_ray_starting_inside_hits():
    ray = Ray((0.5, 0.5, 0.5), (0.3, -0.2, 0.9))
    assert unit_box().intersects(ray, 0.0)


def test_translation_moves_points_by_offset():
    offset = np.array([5.0, -1.0, -10.0])
    point = np.array([0.25, 3.0, -2.0])
    assert np.allclose(transform_point(translation_matrix(offset), point), point + offset)


def test_scale_multiplies_components():
    factors = np.array([2.0, 0.5, -3.0])
    point = np.array([1.0, 4.0, 2.0])
    assert np.allclose(transform_point(scale_matrix(factors), point), point * factors)


def test_identity_quaternion_is_identity_matrix():
    assert np.allclose(quaternion_matrix(1.0, 0.0, 0.0, 0.0), np.eye(4))


def test_quaternion_matrix_is_rotation():
    q = np.array([0.795, -0.002, -0.575, 0.192])
    q = q / np.linalg.norm(q)
    rotation = quaternion_matrix(*q)[:3, :3]
    assert np.allclose(rotation @ rotation.T, np.eye(3))
    assert np.linalg.det(rotation) == pytest.approx(1.0)


def test_axis_angle_matches_quaternion():
    angle = math.pi / 3
    axis = np.array([2 / 3, -2 / 3, 1 / 3])
    s = math.sin(angle / 2)
    expected = quaternion_matrix(math.cos(angle / 2), *(axis * s))
    assert np.allclose(axis_angle_matrix(angle, axis), expected)


def test_axis_angle_keeps_axis_and_lengths():
    axis = np.array([1.0, 2.0, -0.5])
    matrix = axis_angle_matrix(1.1, axis)
    assert np.allclose(transform_point(matrix, axis), axis)
    point = np.array([3.0, -1.0, 0.25])
    assert np.linalg.norm(transform_point(matrix, point)) == pytest.approx(np.linalg.norm(point))


def test_axis_angle_normalises_axis():
    assert np.allclose(axis_angle_matrix(0.7, (0.0, 0.0, 5.0)), axis_angle_matrix(0.7, (0.0, 0.0, 1.0)))


def test_axis_angle_rejects_zero_axis():
    with pytest.raises(ValueError):
        axis_angle_matrix(1.0, (0.0, 0.0, 0.0))


def test_transform_point_rejects_bad_matrix():
    with pytest.raises(ValueError):
        transform_point(np.eye(3), (1.0, 2.0, 3.0))