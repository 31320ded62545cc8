[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "anchorkit"
version = "0.1.0"
description = "Table-driven finite state machines, compact fixed-layout logging and SONAR attribute types"
requires-python = ">=3.10"
dependencies = []
keywords = ["fsm", "state machine", "logging", "embedded", "sonar", "attributes"]
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
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["anchorkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
