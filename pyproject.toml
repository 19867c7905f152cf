[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "minisqlnet"
version = "0.1.0"
description = "Building blocks of a small SQL database server: result codes, query structures, result tuples, sessions, a NUL-framed socket server and an interactive client"
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "database", "server", "client", "tuple", "socket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minisqlnet-client = "minisqlnet.client:main"

[tool.setuptools.packages.find]
include = ["minisqlnet*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
