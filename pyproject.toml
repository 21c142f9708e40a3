[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kmstext"
version = "0.1.0"
description = "Console text rendering with pluggable backends, an in-memory 2D framebuffer, logging and small container helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["terminal", "console", "text-rendering", "framebuffer", "logging"]
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
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kmstext"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
