[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "doomview"
version = "0.1.0"
description = "Map loading, BSP traversal, projection, frame clipping and mesh building for classic Doom-format levels"
requires-python = ">=3.10"
dependencies = []
keywords = ["doom", "wad", "bsp", "glbsp", "projection", "mesh", "game"]
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
    "Topic :: Games/Entertainment :: First Person Shooters",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["doomview*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
