[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reactornet"
version = "0.1.0"
description = "Building blocks for event-driven network code: ring buffers, buffer pools, a readiness poller, socket helpers, logging setup and a worker pool."
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "event-loop", "reactor", "selectors", "poller", "ring-buffer", "sockets", "worker-pool"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: BSD",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["reactornet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
