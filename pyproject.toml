[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeekit"
version = "0.1.0"
description = "Text buffers, grapheme-aware cursors, undo trees, highlighting rules and tree-sitter grammar management for a text editor"
requires-python = ">=3.10"
keywords = ["editor", "text", "grapheme", "cursor", "undo", "highlighting", "tree-sitter"]
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
    "Topic :: Text Editors",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "regex",
    "wcwidth",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zeekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
