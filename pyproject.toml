[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fieldkit"
version = "0.1.0"
description = "Building blocks for field-device tooling: strict URL parsing, JSON number handling, string storage, byte writers, a memory pool and a DHT20 sensor driver."
requires-python = ">=3.10"
dependencies = []
keywords = ["url", "json", "numbers", "memory-pool", "dht20", "i2c", "crc8", "embedded"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fieldkit"]

[tool.hatch.build.targets.sdist]
include = ["fieldkit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
