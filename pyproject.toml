[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hexamotion"
version = "0.1.0"
description = "Kinematics and body posing for six-legged walking robots"
requires-python = ">=3.10"
keywords = ["hexapod", "robotics", "kinematics", "inverse-kinematics", "quaternion", "bezier"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hexamotion"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
