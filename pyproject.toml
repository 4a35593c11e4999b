[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ddnsclient"
version = "2.9.0"
description = "Building blocks for a small dynamic DNS update client: HTTP/TLS transport, provider registry, hashing, base64 and JSON tokenizing."
requires-python = ">=3.10"
dependencies = []
keywords = ["ddns", "dynamic-dns", "dns", "http", "jsmn", "provider"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ddnsclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
