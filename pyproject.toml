[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fogofwar"
version = "0.1.0"
description = "A small networked real-time strategy game with fog of war, played over websockets"
requires-python = ">=3.10"
keywords = ["game", "rts", "strategy", "fog-of-war", "websockets", "multiplayer", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Real Time Strategy",
]
dependencies = [
    "websockets",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fogofwar-server = "fogofwar.server:main"
fogofwar-client = "fogofwar.client:main"

[tool.hatch.build.targets.wheel]
packages = ["fogofwar"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
