from dataclasses import dataclass, field

from packaging.version import Version

from buildcfg import config
from buildcfg import utils


# Solidity compiler 0.6.12
SOLC_V0_6_12: str = "0.6.12"
# Solidity compiler 0.8.11
SOLC_V0_8_11: str = "0.8.11"

# Vyper compiler releases
VYPER_V0_3_3: str = "0.3.3"
VYPER_V0_3_1: str = "0.3.1"
VYPER_V0_2_4: str = "0.2.4"
VYPER_V0_2_7: str = "0.2.7"
VYPER_V0_2_12: str = "0.2.12"


def _require_keys(data: object, where: str, allowed: set[str]) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be a mapping, got: {data!r}")
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unknown key(s) in {where}: {', '.join(sorted(unknown))}")
    return data


def _check_version(version: object, where: str) -> str:
    if not utils.is_semver(version):
        raise ValueError(
            f"{where}: invalid compiler version {version!r}, expected 'MAJOR.MINOR.PATCH'"
        )
    return version


@dataclass(frozen=True)
class MetadataSettings:
    """Whether the metadata hash is appended to the bytecode, and which kind."""

    bytecode_hash: str = config.DEFAULT_BYTECODE_HASH

    def __post_init__(self) -> None:
        if self.bytecode_hash not in config.BYTECODE_HASHES:
            raise ValueError(
                f"metadata.bytecodeHash must be one of "
                f"{', '.join(config.BYTECODE_HASHES)}, got: {self.bytecode_hash!r}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "MetadataSettings":
        data = _require_keys(data, "metadata", {"bytecodeHash"})
        return cls(bytecode_hash=data.get("bytecodeHash", config.DEFAULT_BYTECODE_HASH))

    def to_dict(self) -> dict:
        return {"bytecodeHash": self.bytecode_hash}


@dataclass(frozen=True)
class OptimizerSettings:
    enabled: bool = True
    runs: int = config.DEFAULT_OPTIMIZER_RUNS

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError(f"optimizer.enabled must be a boolean, got: {self.enabled!r}")
        # bool is an int subclass; `runs: true` is a typo, not a count
        if isinstance(self.runs, bool) or not isinstance(self.runs, int) or self.runs < 1:
            raise ValueError(f"optimizer.runs must be a positive integer, got: {self.runs!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "OptimizerSettings":
        data = _require_keys(data, "optimizer", {"enabled", "runs"})
        return cls(
            enabled=data.get("enabled", True),
            runs=data.get("runs", config.DEFAULT_OPTIMIZER_RUNS),
        )

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "runs": self.runs}


@dataclass(frozen=True)
class CompilerSettings:
    """
    The ``settings`` object handed to solc's standard JSON input.

    Only the keys this project configures are modelled: metadata and optimizer.
    """

    metadata: MetadataSettings = field(default_factory=MetadataSettings)
    optimizer: OptimizerSettings = field(default_factory=OptimizerSettings)

    @classmethod
    def from_dict(cls, data: dict) -> "CompilerSettings":
        data = _require_keys(data, "settings", {"metadata", "optimizer"})
        return cls(
            metadata=MetadataSettings.from_dict(data.get("metadata", {})),
            optimizer=OptimizerSettings.from_dict(data.get("optimizer", {})),
        )

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "optimizer": self.optimizer.to_dict(),
        }


@dataclass(frozen=True)
class SolidityCompiler:
    version: str
    settings: CompilerSettings | None = None

    def __post_init__(self) -> None:
        _check_version(self.version, "solidity")

    @property
    def semver(self) -> Version:
        return Version(".".join(map(str, utils.parse_semver(self.version))))

    @classmethod
    def from_dict(cls, data: dict | str) -> "SolidityCompiler":
        if isinstance(data, str):
            return cls(version=data)
        data = _require_keys(data, "solidity compiler", {"version", "settings"})
        if "version" not in data:
            raise ValueError(f"solidity compiler entry without a version: {data!r}")
        settings = data.get("settings")
        return cls(
            version=data["version"],
            settings=CompilerSettings.from_dict(settings) if settings is not None else None,
        )

    def to_dict(self) -> dict:
        out: dict = {"version": self.version}
        if self.settings is not None:
            out["settings"] = self.settings.to_dict()
        return out


@dataclass(frozen=True)
class VyperCompiler:
    version: str

    def __post_init__(self) -> None:
        _check_version(self.version, "vyper")

    @property
    def semver(self) -> Version:
        return Version(".".join(map(str, utils.parse_semver(self.version))))

    @classmethod
    def from_dict(cls, data: dict | str) -> "VyperCompiler":
        if isinstance(data, str):
            return cls(version=data)
        data = _require_keys(data, "vyper compiler", {"version"})
        if "version" not in data:
            raise ValueError(f"vyper compiler entry without a version: {data!r}")
        return cls(version=data["version"])

    def to_dict(self) -> dict:
        return {"version": self.version}


# Shared by every Solidity release; the optimizer can be disabled when debugging
DEFAULT_SETTINGS = CompilerSettings(
    metadata=MetadataSettings(bytecode_hash=config.DEFAULT_BYTECODE_HASH),
    optimizer=OptimizerSettings(enabled=True, runs=config.DEFAULT_OPTIMIZER_RUNS),
)

SOLIDITY_COMPILERS: tuple[SolidityCompiler, ...] = (
    SolidityCompiler(version=SOLC_V0_6_12, settings=DEFAULT_SETTINGS),
    SolidityCompiler(version=SOLC_V0_8_11, settings=DEFAULT_SETTINGS),
)

VYPER_COMPILERS: tuple[VyperCompiler, ...] = (
    VyperCompiler(version=VYPER_V0_3_3),
    VyperCompiler(version=VYPER_V0_3_1),
    VyperCompiler(version=VYPER_V0_2_4),
    VyperCompiler(version=VYPER_V0_2_7),
    VyperCompiler(version=VYPER_V0_2_12),
)
