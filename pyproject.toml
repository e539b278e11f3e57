[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gamebase"
version = "0.1.0"
description = "Small game-engine toolkit: scene files, chunked binary data, PNG and WAV loading, a software audio mixer and an orbit camera"
requires-python = ">=3.10"
keywords = ["game", "scene", "audio", "mixer", "png", "wav", "camera", "font"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Sound/Audio :: Mixers",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gamebase"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
