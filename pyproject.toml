[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drillrun"
version = "5.5.1"
description = "Run, verify and track small compiler-checked Rust exercises from the terminal"
requires-python = ">=3.11"
keywords = ["exercises", "learning", "rust", "teaching", "watch", "verify"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Computer Aided Instruction (CAI)",
]
dependencies = [
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
drillrun = "drillrun.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["drillrun"]

[tool.pytest.ini_options]
addopts = "-ra"
