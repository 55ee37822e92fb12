[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "emrtracks"
version = "0.1.0"
description = "Time-indexed patient record tracks: timestamps, calendar conversion, intervals, binning, sparse tracks, iterators and filters"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "emr",
    "medical records",
    "time series",
    "tracks",
    "intervals",
    "binning",
    "percentiles",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["emrtracks"]

[tool.pytest.ini_options]
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
