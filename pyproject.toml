[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "baro280"
version = "0.1.0"
description = "Register protocol, configuration and compensation arithmetic for the BMP280 barometric pressure and temperature sensor"
requires-python = ">=3.10"
dependencies = []
keywords = ["bmp280", "barometer", "pressure", "temperature", "sensor", "spi", "i2c"]
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
    "Topic :: System :: Hardware :: Hardware Drivers",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["baro280"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
