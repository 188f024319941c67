[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stacksmith"
version = "0.1.0"
description = "A lightweight command-line tool for managing stacked Git branches with plain Git"
requires-python = ">=3.10"
keywords = ["git", "stacked-branches", "rebase", "pull-request", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]
dependencies = [
    "pyyaml",
    "blessed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
stacksmith = "stacksmith.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["stacksmith"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
