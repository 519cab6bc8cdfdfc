# buildcfg/config.py

# Configuration constants used across the package and scripts

# Default logger name
LOGGER_NAME: str = "buildcfg"

# Network profile selected when nothing else is requested
DEFAULT_NETWORK: str = "hardhat"

# Default project layout, relative to the project directory
DEFAULT_ARTIFACTS_PATH: str = "./artifacts"
DEFAULT_CACHE_PATH: str = "./cache"
DEFAULT_SOURCES_PATH: str = "./contracts"
DEFAULT_TESTS_PATH: str = "./test"

# Values accepted by solc for settings.metadata.bytecodeHash
BYTECODE_HASHES: tuple[str, ...] = ("none", "ipfs", "bzzr1")

# Not embedding the metadata hash keeps bytecode reproducible
DEFAULT_BYTECODE_HASH: str = "none"

# Optimizer tuning: expected number of calls per deployed contract
DEFAULT_OPTIMIZER_RUNS: int = 800

# Config files searched in the project directory, in order
CONFIG_FILE_NAMES: tuple[str, ...] = (
    "buildcfg.yaml",
    "buildcfg.yml",
    "buildcfg.json",
)

# Source file suffix per compiler family
SOURCE_SUFFIXES: dict[str, str] = {
    "solidity": ".sol",
    "vyper": ".vy",
}

# Compiler binary per compiler family
COMPILER_BINARIES: dict[str, str] = {
    "solidity": "solc",
    "vyper": "vyper",
}

# Environment variables
ENV_CONFIG_FILE: str = "BUILDCFG_FILE"
ENV_NETWORK: str = "HARDHAT_NETWORK"
