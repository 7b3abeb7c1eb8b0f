[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "symfloppy"
version = "1.0.0"
description = "Follow the notes of one MIDI channel as square-wave tones, with a small web interface for the song library."
requires-python = ">=3.10"
dependencies = [
    "flask",
]
keywords = ["midi", "music box", "buzzer", "square wave", "melody", "player", "flask"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
symfloppy = "symfloppy.app:main"

[tool.hatch.build.targets.wheel]
packages = ["symfloppy"]

[tool.hatch.build.targets.sdist]
include = ["symfloppy", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
