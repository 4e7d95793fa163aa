[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gridslam"
version = "0.1.0"
description = "Grid-based particle-filter SLAM building blocks and tools for GFS log files"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "slam",
    "particle filter",
    "occupancy grid",
    "robotics",
    "laser scan",
    "motion model",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gfs2log = "gridslam.gfs2log:main"
gfs2neff = "gridslam.gfs2neff:main"
gfs2rec = "gridslam.gfs2rec:main"

[tool.hatch.build.targets.wheel]
packages = ["gridslam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
