import numpy as np
import pytest

from rigidcollide.collider import TriangleCollider
from rigidcollide.geometry import Ray, translation_matrix
from rigidcollide.raycast import GJKRayCaster

TOLERANCE = 1e-5
TRIANGLE = [(-1.0, -1.0, 0.0), (1.0, -1.0, 0.0), (0.0, 1.0, 0.0)]


@pytest.fixture
def triangle():
    return TriangleCollider(TRIANGLE)


def make_caster(seed=0, max_iterations=100):
    return GJKRayCaster(1e-7, max_iterations, rng=np.random.default_rng(seed))


def test_straight_hit_distance_and_point(triangle):
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    assert hit.distance == pytest.approx(5.0, abs=TOLERANCE)
    np.testing.assert_allclose(hit.contact_point_world, [0.0, 0.0, 0.0], atol=TOLERANCE)
    np.testing.assert_allclose(hit.contact_point_local, [0.0, 0.0, 0.0], atol=TOLERANCE)


def test_hit_normal_is_unit_and_faces_ray(triangle):
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    assert float(np.linalg.norm(hit.contact_normal)) == pytest.approx(1.0, abs=TOLERANCE)
    assert float(np.dot(hit.contact_normal, ray.direction)) < 0.0


def test_offset_hit_point(triangle):
    ray = Ray((0.3, -0.2, 5.0), (0.0, 0.0, -1.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    assert hit.distance == pytest.approx(5.0, abs=TOLERANCE)
    np.testing.assert_allclose(hit.contact_point_world, [0.3, -0.2, 0.0], atol=TOLERANCE)


def test_hit_point_lies_on_ray(triangle):
    ray = Ray((0.2, 0.1, 3.0), (0.0, 0.0, -1.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    expected = ray.origin + hit.distance * ray.direction
    np.testing.assert_allclose(hit.contact_point_world, expected, atol=TOLERANCE)


def test_translated_triangle_keeps_local_point(triangle):
    triangle.set_transforms(translation_matrix((0.0, 0.0, -2.0)))
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    assert hit.distance == pytest.approx(7.0, abs=TOLERANCE)
    np.testing.assert_allclose(hit.contact_point_world, [0.0, 0.0, -2.0], atol=TOLERANCE)
    np.testing.assert_allclose(hit.contact_point_local, [0.0, 0.0, 0.0], atol=TOLERANCE)


def test_distance_is_measured_in_direction_units(triangle):
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, -2.0))
    hit = make_caster().calculate_ray_cast(ray, triangle)
    assert hit is not None
    assert hit.distance == pytest.approx(2.5, abs=TOLERANCE)


def test_ray_beside_triangle_misses(triangle):
    ray = Ray((5.0, 5.0, 5.0), (0.0, 0.0, -1.0))
    assert make_caster().calculate_ray_cast(ray, triangle) is None


def test_ray_pointing_away_misses(triangle):
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
    assert make_caster().calculate_ray_cast(ray, triangle) is None


@pytest.mark.parametrize("seed", [1, 2, 3, 42])
def test_result_does_not_depend_on_random_start(triangle, seed):
    ray = Ray((0.1, 0.1, 4.0), (0.0, 0.0, -1.0))
    reference = make_caster(0).calculate_ray_cast(ray, triangle)
    hit = make_caster(seed).calculate_ray_cast(ray, triangle)
    assert reference is not None and hit is not None
    assert hit.distance == pytest.approx(reference.distance, abs=TOLERANCE)
    np.testing.assert_allclose(
        hit.contact_point_world, reference.contact_point_world, atol=TOLERANCE
    )


def test_no_iterations_gives_no_hit(triangle):
    ray = Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    assert make_caster(max_iterations=0).calculate_ray_cast(ray, triangle) is None