[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "contract-extrinsics"
version = "0.1.0"
description = "Encode and decode pallet-contracts calls, runtime API results, contract storage and events for Substrate-based chains"
requires-python = ">=3.10"
keywords = ["substrate", "smart-contracts", "scale", "json-rpc", "extrinsics"]
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
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "websockets",
    "termcolor",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["contract_extrinsics"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
