[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lunara"
version = "0.1.0"
description = "A small tensor-graph IR with shape inference, constant folding, elementwise fusion planning and a CPU reference interpreter"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["ir", "graph", "tensor", "compiler", "fusion", "interpreter", "machine-learning"]
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
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["lunara"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
