[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rigidcollide"
version = "0.1.0"
description = "Collision detection building blocks for rigid bodies: colliders, AABB trees, GJK intersection tests and ray casts"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["physics", "collision", "gjk", "raycast", "aabb", "bvh"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rigidcollide"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
