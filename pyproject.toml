[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "demfill"
version = "0.1.0"
description = "Depression filling for digital elevation models with several priority-flood variants"
requires-python = ">=3.10"
keywords = ["dem", "depression filling", "priority-flood", "hydrology", "terrain", "geotiff"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Scientific/Engineering :: Hydrology",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
demfill = "demfill.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["demfill"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
