[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcpschema"
version = "0.1.0"
description = "JSON Schema (draft 2020-12) modelling, encoding, resolution and validation"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "json-schema", "validation", "schema", "2020-12", "json-pointer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: File Formats :: JSON :: JSON Schema",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mcpschema"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
