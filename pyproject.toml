[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hdcamlink"
version = "0.1.0"
description = "Framed serial protocol for HD cameras on a UART link, with host and slave heartbeat loops"
requires-python = ">=3.10"
keywords = ["serial", "uart", "camera", "protocol", "crc16", "heartbeat"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Terminals :: Serial",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hdcamlink-host = "hdcamlink.host:main"
hdcamlink-slave = "hdcamlink.slave:main"

[tool.hatch.build.targets.wheel]
packages = ["hdcamlink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
