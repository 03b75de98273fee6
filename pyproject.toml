[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sattrack"
version = "0.1.0"
description = "Satellite tracking tools: TLE handling, near-earth SGP4 propagation, coordinate frames and observation formats"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "satellite",
    "tle",
    "sgp4",
    "orbit",
    "astronomy",
    "iod",
    "telescope",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sex2dec = "sattrack.astro:sex2dec_main"
tle2ole = "sattrack.tle:main"
slewto = "sattrack.slewto:main"
uk2iod = "sattrack.uk2iod:main"
tle2rv = "sattrack.frames:main"
tleinfo = "sattrack.tleinfo:main"
vadd = "sattrack.vadd:main"

[tool.hatch.build.targets.wheel]
packages = ["sattrack"]

[tool.hatch.build.targets.sdist]
include = ["sattrack", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
