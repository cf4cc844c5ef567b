[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "depotapi"
version = "0.1.0"
description = "Framework-independent request handlers and in-memory services for a warehouse and logistics REST API."
requires-python = ">=3.10"
dependencies = []
keywords = ["rest", "api", "handlers", "warehouse", "inventory", "logistics"]
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
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["depotapi"]

[tool.pytest.ini_options]
addopts = "-ra"
