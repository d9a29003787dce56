[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fleuryidx"
version = "0.1.0"
description = "Code indexing, token walking and snippet slots for text editors, with a Metadesk lexer and a C/C++ indexer"
requires-python = ">=3.10"
dependencies = []
keywords = ["code-index", "lexer", "metadesk", "cpp", "editor", "tokens"]
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
    "Topic :: Text Editors",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fleuryidx"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
