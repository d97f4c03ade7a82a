[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "obliviousds"
version = "0.1.0a3"
description = "Data structures whose access pattern does not reveal which element is touched: arrays, queues, stacks, vectors, hash maps and heaps."
requires-python = ">=3.10"
dependencies = []
keywords = ["oblivious", "oram", "privacy", "data-structures", "heap", "hashmap", "cuckoo-hashing"]
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
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["obliviousds"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
