[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "whs_sniff"
version = "0.1.0"
description = "A small packet sniffer that prints Ethernet, IPv4 and TCP details of TCP segments carrying the PSH flag"
requires-python = ">=3.10"
dependencies = []
keywords = ["sniffer", "packet", "tcp", "ethernet", "hexdump", "network"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
whs_sniff = "whs_sniff.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["whs_sniff"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
