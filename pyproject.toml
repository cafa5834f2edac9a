[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kilnbuild"
version = "0.4.0"
description = "Build pipeline and Verilator backend for SystemVerilog projects."
requires-python = ">=3.10"
dependencies = []
keywords = ["systemverilog", "verilator", "build", "hdl", "simulation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kilnbuild"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
