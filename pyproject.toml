[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "promohub"
version = "0.1.0"
description = "Promotion tracking HTTP API on SQLite, with a student records API, a health-checked web service and an arithmetic problem arranger"
requires-python = ">=3.10"
keywords = ["promotions", "rest", "flask", "crud", "sqlite", "websocket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "flask>=2.2",
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
promohub-promotions = "promohub.web:main"
promohub-server = "promohub.server:main"

[tool.hatch.build.targets.wheel]
packages = ["promohub"]

[tool.hatch.build.targets.sdist]
include = ["promohub", "tests"]

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
ignore_missing_imports = true
