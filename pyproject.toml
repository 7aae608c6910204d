[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appimage-helpers"
version = "0.1.0"
description = "Helpers for preparing, inspecting and integrating AppImages"
requires-python = ">=3.10"
keywords = ["appimage", "appdir", "elf", "desktop-file", "zsync", "digest", "mqtt"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "cryptography",
    "packaging",
    "paho-mqtt>=2.0",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["appimage_helpers"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
