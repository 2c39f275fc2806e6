[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scaladvisor"
version = "0.1.0"
description = "Building blocks for cluster scale-out advice: instance pricing, node scoring, simulation grouping and a pricing tool"
requires-python = ">=3.10"
dependencies = []
keywords = ["scaling", "autoscaling", "cluster", "pricing", "node-scoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
scadctl = "scaladvisor.scadctl:main"

[tool.hatch.build.targets.wheel]
packages = ["scaladvisor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
