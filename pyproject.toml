[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xgrep"
version = "0.3.2"
description = "Building blocks for searching .xlsx, .xlsm, .csv and .tsv files"
requires-python = ">=3.11"
dependencies = []
keywords = ["grep", "search", "xlsx", "excel", "csv", "tsv", "spreadsheet", "shared-strings"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Filters",
    "Topic :: Office/Business :: Financial :: Spreadsheet",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xgrep-benchgen = "xgrep.benchgen:main"

[tool.hatch.build.targets.wheel]
packages = ["xgrep"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
