[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "f1clash"
version = "0.5.0"
description = "Part and driver catalogue, upgrade calculator, setup optimizer and anonymous analytics for F1 Clash players"
requires-python = ">=3.10"
dependencies = []
keywords = ["f1", "f1-clash", "optimizer", "setup", "upgrade-calculator", "analytics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["f1clash"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
