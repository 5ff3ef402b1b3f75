[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eventhub"
version = "0.1.0"
description = "Service layer for an events platform: events, categories, interests, communities, reviews and companion matching, kept in memory"
requires-python = ">=3.10"
dependencies = []
keywords = ["events", "communities", "reviews", "matching", "interests", "export"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Natural Language :: Russian",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["eventhub"]

[tool.pytest.ini_options]
addopts = "-ra"
