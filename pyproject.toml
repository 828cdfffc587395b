[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "espnowsync"
version = "0.1.0"
description = "Blink synchronisation among peers on an ESP-NOW style broadcast link, with a compact typed value packer, a sorted map, a ring buffer, a peer list and per-tag debug levels"
requires-python = ">=3.10"
dependencies = []
keywords = ["esp-now", "synchronisation", "peer list", "ring buffer", "message pack", "keepalive"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["espnowsync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
