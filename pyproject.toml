[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "routecuts"
version = "0.1.0"
description = "Two-matching and strengthened comb separation for capacitated vehicle routing, with an adaptive large neighbourhood search driver."
requires-python = ">=3.10"
dependencies = [
    "networkx",
]
keywords = [
    "vehicle routing",
    "cvrp",
    "cutting planes",
    "comb inequalities",
    "two-matching",
    "alns",
    "optimization",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["routecuts"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
