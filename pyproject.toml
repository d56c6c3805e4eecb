[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "exercisekit"
version = "5.5.1"
description = "Run, verify and grade small compiler-checked programming exercises from the command line"
requires-python = ">=3.11"
keywords = ["exercises", "education", "grading", "watch", "teaching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Testing",
]
dependencies = [
    "rich",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
exercisekit = "exercisekit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["exercisekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
