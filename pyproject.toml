[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "logmgr"
version = "0.1.0"
description = "Structured JSON logging with background workers and console, file and rotating file sinks"
requires-python = ">=3.10"
dependencies = []
keywords = ["logging", "structured-logging", "json", "log-rotation", "sinks"]
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
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
logmgr-example = "logmgr.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["logmgr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
