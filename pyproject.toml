[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bellerophon"
version = "0.1.0"
description = "Model rocket flight computer logic: configuration, file logging, pyro and servo control, flight states and serial commands."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "rocketry",
    "flight-computer",
    "state-machine",
    "telemetry",
    "data-logging",
    "embedded",
]
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
    "Topic :: Software Development :: Embedded Systems",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bellerophon"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
