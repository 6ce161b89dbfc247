[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vitae"
version = "0.1.0"
description = "A small stack-based bytecode virtual machine with tables, strings and a mark-and-sweep collector"
requires-python = ">=3.10"
dependencies = []
keywords = ["virtual machine", "bytecode", "interpreter", "stack machine", "assembler", "garbage collection"]
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
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vitae = "vitae.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["vitae"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
