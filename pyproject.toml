[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "logrt"
version = "0.1.0"
description = "Collect the text of log files from folders and nested archives into one merged, optionally sorted log."
requires-python = ">=3.10"
dependencies = []
keywords = ["logs", "log analysis", "archives", "zip", "tar", "gzip", "xz", "bzip2"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: System :: Archiving",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
logrt = "logrt.app:main"

[tool.hatch.build.targets.wheel]
packages = ["logrt"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
