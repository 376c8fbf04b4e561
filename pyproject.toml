[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "acscard"
version = "0.1.0"
description = "Smart card reader, MIFARE Classic and multi-tap keypad logic for ACS handheld terminals"
requires-python = ">=3.10"
dependencies = []
keywords = ["smart card", "mifare", "apdu", "picc", "icc", "sam", "keypad", "multi-tap"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware :: Universal Serial Bus (USB) :: Smart Card",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["acscard"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
