[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mdtome"
version = "0.1.0"
description = "Load books written in Markdown from a SUMMARY.md outline and plan their preprocessing and rendering."
requires-python = ">=3.11"
dependencies = [
    "markdown-it-py",
]
keywords = ["markdown", "book", "summary", "documentation", "preprocessor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Topic :: Documentation",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mdtome"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
